from pathlib import Path

TESTS_PATH = Path(__file__).parent
