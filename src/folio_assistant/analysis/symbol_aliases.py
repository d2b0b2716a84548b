"""Static lookup data for symbol resolution, loaded once at import."""

from types import MappingProxyType

# Common company, fund and index names mapped to their primary tickers.
COMPANY_NAME_SYMBOL_ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        "adobe": "ADBE",
        "advanced micro devices": "AMD",
        "amd": "AMD",
        "airbnb": "ABNB",
        "alphabet": "GOOGL",
        "amazon": "AMZN",
        "amgen": "AMGN",
        "arm": "ARM",
        "asml": "ASML",
        "apple": "AAPL",
        "bank of america": "BAC",
        "baidu": "BIDU",
        "bnd": "BND",
        "berkshire": "BRK.B",
        "berkshire hathaway": "BRK.B",
        "berkshire class b": "BRK.B",
        "blackrock": "BLK",
        "block": "SQ",
        "boeing": "BA",
        "booking": "BKNG",
        "broadcom": "AVGO",
        "cadence": "CDNS",
        "chevron": "CVX",
        "cisco": "CSCO",
        "citigroup": "C",
        "coca cola": "KO",
        "coinbase": "COIN",
        "comcast": "CMCSA",
        "conocophillips": "COP",
        "costco": "COST",
        "crowdstrike": "CRWD",
        "delta": "DAL",
        "dia": "DIA",
        "disney": "DIS",
        "eli lilly": "LLY",
        "exxon": "XOM",
        "exxon mobil": "XOM",
        "ford": "F",
        "general electric": "GE",
        "google": "GOOGL",
        "gld": "GLD",
        "gold etf": "GLD",
        "goldman sachs": "GS",
        "ibm": "IBM",
        "intel": "INTC",
        "intuit": "INTU",
        "ivv": "IVV",
        "iwm": "IWM",
        "jnj": "JNJ",
        "johnson and johnson": "JNJ",
        "jpmorgan": "JPM",
        "linde": "LIN",
        "lockheed martin": "LMT",
        "lowes": "LOW",
        "mastercard": "MA",
        "mcdonalds": "MCD",
        "mckesson": "MCK",
        "merck": "MRK",
        "meta": "META",
        "micron": "MU",
        "microsoft": "MSFT",
        "morgan stanley": "MS",
        "netflix": "NFLX",
        "nike": "NKE",
        "nvidia": "NVDA",
        "oracle": "ORCL",
        "palantir": "PLTR",
        "paypal": "PYPL",
        "pepsico": "PEP",
        "pfizer": "PFE",
        "procter and gamble": "PG",
        "qqq": "QQQ",
        "qualcomm": "QCOM",
        "raytheon": "RTX",
        "rivian": "RIVN",
        "s and p 500": "SPY",
        "s&p 500": "SPY",
        "salesforce": "CRM",
        "schwab dividend": "SCHD",
        "schd": "SCHD",
        "servicenow": "NOW",
        "shopify": "SHOP",
        "s and p etf": "SPY",
        "sofi": "SOFI",
        "soxx": "SOXX",
        "s p 500": "SPY",
        "spotify": "SPOT",
        "spy": "SPY",
        "tesla": "TSLA",
        "technology select sector": "XLK",
        "t mobile": "TMUS",
        "tmobile": "TMUS",
        "top 100 nasdaq": "QQQ",
        "total bond market": "BND",
        "total stock market": "VTI",
        "total world stock": "VT",
        "20 year treasury": "TLT",
        "tlt": "TLT",
        "toyota": "TM",
        "tsmc": "TSM",
        "uber": "UBER",
        "unitedhealth": "UNH",
        "verizon": "VZ",
        "vanguard s&p 500": "VOO",
        "vanguard total stock market": "VTI",
        "visa": "V",
        "voo": "VOO",
        "vt": "VT",
        "vti": "VTI",
        "walmart": "WMT",
        "wells fargo": "WFC",
        "xlk": "XLK",
        "xom": "XOM",
    }
)

_ENGLISH_STOP_WORDS = """
a about above after all am an and any are as at be because been before being
below between both but by can could did do does doing down during each few for
from further had has have having he her here hers herself him himself his how i
if in into is it its itself just let me more most my myself no nor not now of off
on once only or other our ours ourselves out over own same she should so some
such than that the their theirs them themselves then there these they this those
through to too under until up very was we were what when where which while who
whom why will with would you your yours yourself yourselves
"""

_FINANCE_GENERIC_WORDS = """
buy sell trade show get give tell portfolio account holdings stocks stock shares
price quote value worth balance market etf fund funds news latest today please
"""

FINANCE_STOP_WORDS: frozenset[str] = frozenset(
    (_ENGLISH_STOP_WORDS + _FINANCE_GENERIC_WORDS).split()
)

# Upper-case words that look like tickers but almost never are one.
TICKER_STOP_WORDS: frozenset[str] = frozenset(
    """
    AND FOR GIVE HELP IS MARKET OF PLEASE PORTFOLIO PRICE QUOTE RISK SHOW SYMBOL
    THE TICKER WHAT WITH ETF USD EUR GBP
    """.split()
)
