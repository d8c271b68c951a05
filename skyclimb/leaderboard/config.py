import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Leaderboard service and client settings"""

    # GitHub-backed score store
    GITHUB_TOKEN = os.getenv('GITHUB_TOKEN')
    REPO_OWNER = os.getenv('REPO_OWNER', '')
    REPO_NAME = os.getenv('REPO_NAME', '')
    SCORES_PATH = os.getenv('SCORES_PATH', 'scores')
    BRANCH = os.getenv('BRANCH', 'main')
    GITHUB_API_URL = os.getenv('GITHUB_API_URL', 'https://api.github.com')

    # Store backend: github | directory | memory
    SCORE_STORE = os.getenv('SCORE_STORE', 'directory').lower()
    SCORES_DIR = os.getenv('SCORES_DIR', 'scores')

    # Game client (empty = play offline)
    API_URL = os.getenv('API_URL', '')

    # Seconds; applies to every outgoing HTTP call
    HTTP_TIMEOUT = float(os.getenv('HTTP_TIMEOUT', '5'))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if cls.SCORE_STORE not in ('github', 'directory', 'memory'):
            raise ValueError(f"SCORE_STORE must be github, directory or memory (got {cls.SCORE_STORE!r})")
        if cls.SCORE_STORE == 'github':
            if not cls.GITHUB_TOKEN:
                raise ValueError("GITHUB_TOKEN is required for the github store")
            if not cls.REPO_OWNER or not cls.REPO_NAME:
                raise ValueError("REPO_OWNER and REPO_NAME are required for the github store")
        if cls.HTTP_TIMEOUT <= 0:
            raise ValueError("HTTP_TIMEOUT must be positive")
