"""Default endpoints and queries."""

DEFAULT_SUBGRAPH_URL = "https://api.thegraph.com/subgraphs/name/picodes/transaction"
DEFAULT_PRICE_API_URL = "https://pro-api.coinmarketcap.com/v2/cryptocurrency/quotes/latest"
DEFAULT_EXCHANGE_RATE_URL = (
    "https://api.apilayer.com/exchangerates_data/convert?to=USD&from=EUR&amount=1"
)
DEFAULT_TELEGRAM_API_URL = "https://api.telegram.org"

STABLECOIN_DATA_QUERY = (
    "{ stableDatas { name, totalMinted, collatRatio, collaterals "
    "{ collatName, decimals, stockSLP, stockUser, totalAsset, "
    "totalHedgeAmount, totalMargin } } }"
)

# Telegram rejects messages longer than this.
TELEGRAM_MAX_MESSAGE_LENGTH = 4096

# HTTP statuses worth retrying.
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

REPORT_DIVIDER = "-----------"
