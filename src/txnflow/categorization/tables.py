"""Static merchant and keyword tables.

Ordering matters: groups are scanned top to bottom and the first group
with a matching substring wins. Each group points at a taxonomy entry by
(name, subcategory).
"""

MERCHANT_TABLE_CONFIDENCE = 0.75
KEYWORD_TABLE_CONFIDENCE = 0.65

# (substring patterns, (category name, subcategory)); matched against the
# lowercased merchant text, or the description when no merchant is known
MERCHANT_PATTERNS: list[tuple[tuple[str, ...], tuple[str, str | None]]] = [
    (("starbucks", "dunkin", "coffee", "peet's"), ("Food & Drink", "Coffee Shops")),
    (("mcdonalds", "mcdonald's", "burger king", "taco bell", "kfc", "wendy's", "chipotle"),
     ("Food & Drink", "Fast Food")),
    (("doordash", "grubhub", "uber eats", "ubereats"), ("Food & Drink", "Restaurants")),
    (("walmart", "target", "costco", "safeway", "kroger", "trader joe", "whole foods", "aldi"),
     ("Groceries", None)),
    (("shell", "exxon", "chevron", "sunoco", "valero"), ("Auto & Transport", "Gas")),
    (("uber", "lyft", "taxi"), ("Auto & Transport", "Taxi & Rideshare")),
    (("amazon", "amzn", "ebay", "etsy"), ("Shopping", "Online Marketplaces")),
    (("best buy", "apple store"), ("Shopping", "Electronics")),
    (("netflix", "hulu", "disney+", "spotify", "hbo max", "paramount+", "peacock"),
     ("Bills & Utilities", "Streaming")),
    (("gas company", "power company", "edison", "pg&e"), ("Bills & Utilities", "Gas & Electric")),
    (("comcast", "xfinity", "spectrum", "verizon fios"), ("Bills & Utilities", "Internet & Cable")),
    (("t-mobile", "at&t", "verizon wireless"), ("Bills & Utilities", "Phone")),
    (("cvs", "walgreens", "rite aid"), ("Medical & Healthcare", "Pharmacy")),
    (("delta air", "united airlines", "american airlines", "southwest"), ("Travel & Vacation", "Flights")),
    (("marriott", "hilton", "hyatt", "airbnb"), ("Travel & Vacation", "Lodging")),
    (("petco", "petsmart", "chewy"), ("Pets", None)),
    (("home depot", "lowe's", "lowes"), ("Home & Garden", "Hardware")),
]

# (keywords, (category name, subcategory)); matched against the lowercased description
KEYWORD_GROUPS: list[tuple[tuple[str, ...], tuple[str, str | None]]] = [
    (("salary", "paycheck", "payroll", "wages", "direct deposit"), ("Income", "Paychecks")),
    (("interest paid", "interest earned", "dividend"), ("Income", "Interest")),
    (("gas station", "fuel", "gasoline"), ("Auto & Transport", "Gas")),
    (("parking", "garage", "meter"), ("Auto & Transport", "Parking")),
    (("toll", "fastrak", "ezpass"), ("Auto & Transport", "Tolls")),
    (("restaurant", "cafe", "diner", "grill", "pizza"), ("Food & Drink", "Restaurants")),
    (("grocery", "supermarket"), ("Groceries", None)),
    (("electric bill", "electricity"), ("Bills & Utilities", "Gas & Electric")),
    (("water bill",), ("Bills & Utilities", "Water")),
    (("phone bill", "cellular"), ("Bills & Utilities", "Phone")),
    (("atm fee", "overdraft", "bank fee"), ("Bank Fees", "ATM Fees")),
    (("credit card payment", "autopay"), ("Credit Card Payment", None)),
    (("transfer", "payment", "ach debit", "ach credit"), ("Transfers", "Transfer In")),
]
