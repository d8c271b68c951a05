# --- Display ---
WIDTH = 960
HEIGHT = 540
FPS = 60
PIXELS_PER_UNIT = 40         # world units -> screen px (side view)
MAX_FRAME_DT = 0.1           # cap on wall-clock frame delta (s)

# --- World / Physics (per frame, world units, y up) ---
GRAVITY = -0.012
JUMP_FORCE = 0.32
MOVE_ACCELERATION = 0.25     # tuning knob, horizontal motion snaps to MAX_MOVE_SPEED
MAX_MOVE_SPEED = 0.15
FRICTION = 0.75              # vx multiplier on ground when no key is held
AIR_FRICTION = 0.8           # vx multiplier in the air
STOP_THRESHOLD = 0.01        # |vx| below this snaps to 0
TERMINAL_VELOCITY = 0.5
TILT_SMOOTHING = 0.1
TILT_Z_PER_VX = -0.8
TILT_X_PER_VY = 0.4

# --- Player ---
PLAYER_W = 0.8
PLAYER_H = 1.5
PLAYER_SPAWN = (0.0, 2.0, 0.0)

# --- Platforms ---
PLATFORM_W = 2.5
PLATFORM_H = 0.3
PLATFORM_D = 2.5
START_PLATFORM_SCALE = 1.8   # start platform is this much wider
PLATFORM_SPACING_MIN = 1.8
PLATFORM_SPACING_MAX = 3.2
HORIZONTAL_RANGE = 4.0
PLAYER_X_LIMIT = HORIZONTAL_RANGE + 2.0
INITIAL_PLATFORMS = 25
LANDING_TOLERANCE = 0.3      # how far below a platform's bottom a falling player still lands
LOOKAHEAD_MARGIN = 40.0      # keep platforms up to camera + this
REMOVAL_MARGIN = 15.0        # retire platforms below camera - this

# --- Camera / Difficulty ---
CAMERA_START_Y = 5.0
CAMERA_LOOK_OFFSET = -1.0
CAMERA_SCROLL_SPEED_INITIAL = 0.02
CAMERA_SCROLL_SPEED_INCREMENT = 0.0001   # per second of run time
CAMERA_SCROLL_SPEED_MAX = 0.08
DEATH_MARGIN = 8.0           # run ends when player.y < camera - this

# --- Score / Leaderboard ---
SCORE_SCALE = 10
MAX_LEADERBOARD_ENTRIES = 10
MAX_NAME_LENGTH = 15
DEFAULT_PLAYER_NAME = "Anonymous"

# --- Colors (RGB) ---
COLOR_BG = (26, 26, 46)
COLOR_FG = (220, 232, 255)
COLOR_ACCENT = (204, 68, 68)
COLOR_GLOW = (0, 255, 136)
COLOR_DANGER = (255, 86, 110)
COLOR_PANEL = (40, 60, 90)
COLOR_PANEL_EDGE = (90, 130, 180)
COLOR_MUTED = (160, 180, 210)
