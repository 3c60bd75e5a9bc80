"""
Configuration file for the accounts_test PostgreSQL demonstration
"""

import os

# Database Configuration (PostgreSQL)
DATABASE_CONFIG = {
    'dsn': os.getenv('DATABASE_URL', 'postgres://gtt@localhost:5432/gtt_main_test'),
}

# Accounts Table Configuration
ACCOUNTS_TABLE = 'accounts_test'
ACCOUNTS_ROW_COUNT = int(os.getenv('ACCOUNTS_ROW_COUNT', '1000'))  # Synthetic rows per populate run
ACCOUNTS_BALANCE_THRESHOLD = float(os.getenv('ACCOUNTS_BALANCE_THRESHOLD', '500.0'))  # Listing filter

# Random seeding: unset means seeded from the clock, the seeded program always uses the fixed seed
_random_seed = os.getenv('ACCOUNTS_RANDOM_SEED')
ACCOUNTS_RANDOM_SEED = int(_random_seed) if _random_seed else None
ACCOUNTS_FIXED_SEED = int(os.getenv('ACCOUNTS_FIXED_SEED', '42'))

# Application Configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Full configuration dictionary
CONFIG = {
    'database': DATABASE_CONFIG,
    'accounts': {
        'table': ACCOUNTS_TABLE,
        'row_count': ACCOUNTS_ROW_COUNT,
        'balance_threshold': ACCOUNTS_BALANCE_THRESHOLD,
        'random_seed': ACCOUNTS_RANDOM_SEED,
        'fixed_seed': ACCOUNTS_FIXED_SEED,
    },
    'app': {
        'log_level': LOG_LEVEL,
        'log_format': LOG_FORMAT,
    },
}
