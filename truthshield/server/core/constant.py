PROJECT_NAME = "TruthShield Pro"
API_V1_STR = "/api/v1"

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Alternative header accepted for bearer tokens
TOKEN_HEADER = "X-TruthShield-Token"
