"""Project configuration settings."""

# FIPS code for New York
STATE_FIPS = "36"

# Reference periods for the BLS state employment series (November, pre-COVID
# versus most recent month available)
BLS_REFERENCE_PERIODS = ("2019_11", "2020_11")

# Simulation defaults
DEFAULT_ITERATIONS = 100
DEFAULT_UI_TAKEUP_RATE = 0.67
DEFAULT_TARGET_BURDEN = 0.30
DEFAULT_CONFIDENCE_LEVEL = 0.90
DEFAULT_BASE_SEED = 2020

# Share of program funds allocated in proportion to population
POPULATION_ALLOCATION_SHARE = 0.45

# Unemployment insurance benefit parameters (weekly dollars)
UI_REPLACEMENT_RATE = 0.5
UI_MIN_WEEKLY_BENEFIT = 104.0
UI_MAX_WEEKLY_BENEFIT = 504.0
UI_MIN_ANNUAL_WAGES = 2400.0
UI_SUPPLEMENTS = {
    'extra600': 600.0,
    'extra300': 300.0,
}
WEEKS_PER_MONTH = 52 / 12

# Logging configuration
LOGGING_CONFIG = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
            'level': 'INFO',
        },
    },
    'loggers': {
        'rental': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False
        }
    }
}
