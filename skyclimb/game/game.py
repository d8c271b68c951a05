# skyclimb/game/game.py
import sys, argparse, colorsys, logging
import pygame
from pygame import K_SPACE, K_ESCAPE, K_RETURN, K_BACKSPACE, K_TAB, K_r, K_w, K_a, K_d, K_UP, K_LEFT, K_RIGHT
from .config import (
    WIDTH, HEIGHT, FPS, PIXELS_PER_UNIT, MAX_NAME_LENGTH,
    COLOR_BG, COLOR_FG, COLOR_ACCENT, COLOR_GLOW, COLOR_DANGER,
    COLOR_PANEL, COLOR_PANEL_EDGE, COLOR_MUTED,
)
from .loop import GameLoop
from .player import InputState
from .state import RunPhase
from ..leaderboard.client import LeaderboardClient
from ..leaderboard.config import Config


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None,
                   help="Platform seed. Omit for a random track each run.")
    p.add_argument("--api-url", type=str, default=None,
                   help="Leaderboard API root (defaults to API_URL; empty = offline).")
    return p.parse_args()


def to_screen(x: float, y: float, look_y: float):
    """World (y up, camera-relative) -> screen px (y down)."""
    return (int(WIDTH / 2 + x * PIXELS_PER_UNIT),
            int(HEIGHT / 2 - (y - look_y) * PIXELS_PER_UNIT))


def platform_color(y: float):
    # cyan -> purple gradient by height
    hue = 0.5 + ((y / 80.0) % 1.0) * 0.4
    r, g, b = colorsys.hls_to_rgb(hue % 1.0, 0.45, 0.8)
    return int(r * 255), int(g * 255), int(b * 255)


def read_inputs() -> InputState:
    keys = pygame.key.get_pressed()
    return InputState(
        left=keys[K_a] or keys[K_LEFT],
        right=keys[K_d] or keys[K_RIGHT],
        jump=keys[K_SPACE] or keys[K_w] or keys[K_UP],
    )


def draw_world(screen, loop: GameLoop):
    s = loop.state
    look_y = s.camera.look_y
    for plat in s.level.platforms:
        b = plat.box
        left, top = to_screen(b.left, b.top, look_y)
        rect = pygame.Rect(left, top, int(b.width * PIXELS_PER_UNIT), max(2, int(b.height * PIXELS_PER_UNIT)))
        if rect.bottom < 0 or rect.top > HEIGHT:
            continue
        pygame.draw.rect(screen, platform_color(plat.y), rect)
        pygame.draw.line(screen, COLOR_GLOW, rect.topleft, rect.topright, 1)

    pb = s.player.box
    left, top = to_screen(pb.left, pb.top, look_y)
    body = pygame.Rect(left, top, int(pb.width * PIXELS_PER_UNIT), int(pb.height * PIXELS_PER_UNIT))
    surf = pygame.Surface(body.size, pygame.SRCALPHA)
    surf.fill(COLOR_ACCENT if loop.running else COLOR_DANGER)
    surf = pygame.transform.rotate(surf, s.player.rotation_z * 57.2958)
    screen.blit(surf, surf.get_rect(center=body.center))


def draw_board(screen, font, board, x, y):
    if not board:
        screen.blit(font.render("No scores yet", True, COLOR_MUTED), (x, y))
        return
    for i, entry in enumerate(board):
        line = f"#{i + 1:<3}{entry.name:<{MAX_NAME_LENGTH + 2}}{entry.score:>7}"
        screen.blit(font.render(line, True, COLOR_FG), (x, y + i * 20))


def run():
    args = parse_args()
    logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    api_url = Config.API_URL if args.api_url is None else args.api_url
    client = LeaderboardClient(api_url) if api_url else None
    loop = GameLoop(leaderboard=client, seed=args.seed)
    if client is not None:
        client.fetch_top_async()   # warm the cache for the title screen / best score

    pygame.init()
    pygame.display.set_caption("SkyClimb")
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("jetbrainsmono", 18)
    big = pygame.font.SysFont("jetbrainsmono", 36)

    name_buffer = ""
    pygame.key.start_text_input()

    def quit_game():
        if client is not None:
            client.close()
        pygame.quit(); sys.exit()

    while True:
        dt = clock.tick(FPS) / 1000.0

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                quit_game()
            if event.type == pygame.TEXTINPUT and loop.can_submit():
                name_buffer = (name_buffer + event.text)[:MAX_NAME_LENGTH]
            if event.type == pygame.KEYDOWN:
                if event.key == K_ESCAPE:
                    quit_game()
                if loop.phase is RunPhase.IDLE and event.key in (K_SPACE, K_RETURN):
                    loop.start()
                elif loop.phase is RunPhase.ENDED:
                    if loop.can_submit():
                        if event.key == K_BACKSPACE:
                            name_buffer = name_buffer[:-1]
                        elif event.key == K_RETURN:
                            loop.submit_score(name_buffer)
                        elif event.key == K_TAB:
                            name_buffer = ""
                            loop.restart()
                    elif event.key in (K_r, K_RETURN):
                        name_buffer = ""
                        loop.restart()

        if loop.running:
            loop.step(read_inputs(), dt)

        # --- Render ---
        screen.fill(COLOR_BG)
        best = client.best_score if client is not None else None

        if loop.state is None:
            title = big.render("SkyClimb", True, COLOR_FG)
            screen.blit(title, (WIDTH // 2 - title.get_width() // 2, 80))
            screen.blit(font.render("SPACE / ENTER to start  |  arrows move, SPACE jump", True, COLOR_MUTED),
                        (WIDTH // 2 - 240, 140))
            if client is not None:
                draw_board(screen, font, client.cached, WIDTH // 2 - 150, 200)
            pygame.display.flip()
            continue

        draw_world(screen, loop)
        hud = f"Score: {loop.state.score}" + (f"   Best: {best}" if best is not None else "")
        screen.blit(font.render(hud, True, COLOR_FG), (12, 10))
        screen.blit(font.render(f"Seed: {loop.state.seed}   ESC quit", True, COLOR_MUTED), (12, 32))

        if loop.phase is RunPhase.ENDED:
            panel = pygame.Rect(WIDTH // 2 - 220, 60, 440, HEIGHT - 120)
            pygame.draw.rect(screen, COLOR_PANEL, panel, border_radius=10)
            pygame.draw.rect(screen, COLOR_PANEL_EDGE, panel, width=2, border_radius=10)
            screen.blit(big.render(f"Game over: {loop.state.score}", True, COLOR_FG), (panel.x + 20, panel.y + 12))

            summary = loop.game_over
            if loop.pending_leaderboard is not None and not loop.pending_leaderboard.done():
                screen.blit(font.render("Loading leaderboard...", True, COLOR_MUTED), (panel.x + 20, panel.y + 64))
            elif summary is not None:
                draw_board(screen, font, summary.leaderboard, panel.x + 20, panel.y + 64)

            footer_y = panel.bottom - 70
            if loop.can_submit():
                prompt = f"New high score! Name: {name_buffer}_   (ENTER save)"
                screen.blit(font.render(prompt, True, COLOR_GLOW), (panel.x + 20, footer_y))
            elif loop.submitting:
                screen.blit(font.render("Saving...", True, COLOR_MUTED), (panel.x + 20, footer_y))
            if loop.submission_error:
                screen.blit(font.render(loop.submission_error, True, COLOR_DANGER), (panel.x + 20, footer_y + 22))
            screen.blit(font.render("TAB skip  |  R / ENTER restart" if loop.can_submit() else "R / ENTER restart", True, COLOR_MUTED), (panel.x + 20, footer_y + 44))

        pygame.display.flip()


if __name__ == "__main__":
    run()
