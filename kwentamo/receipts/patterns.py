"""
Pre-compiled patterns and keyword tables for reading receipt text.

Receipts from palengke stalls, groceries and utility counters are pasted or
typed in line by line; each line is matched against the item layouts below.
"""
import re

AMOUNT = r'(?:₱|PHP|P)?\s?(?:\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)'
QUANTITY = r'\d+(?:\.\d+)?'
UNIT = r'(?:kgs?|kilos?|g|pcs|pc|ltr|l|ml|packs?|pck|bottles?|btl|cans?|bundles?|dozen|doz|trays?|sacks?)'

# "Eggs 30 x 8.00 240.00", "Bigas 25kg @ 52.00"
QTY_AT_PRICE = re.compile(
    rf'^(?P<name>.*?[A-Za-z].*?)\s+(?P<qty>{QUANTITY})\s*(?P<unit>{UNIT})?\s*[x@×]\s*'
    rf'(?P<unit_price>{AMOUNT})(?:\s+(?P<total>{AMOUNT}))?$',
    re.IGNORECASE,
)

# "2 kg Pork Liempo 560.00", "3 Sardinas 66.00"
QTY_FIRST = re.compile(
    rf'^(?P<qty>{QUANTITY})\s*(?P<unit>{UNIT})?\s+(?P<name>.*?[A-Za-z].*?)\s+(?P<total>{AMOUNT})$',
    re.IGNORECASE,
)

# "Meralco bill 2,450.75", "Coke 1.5L 75.00"
NAME_PRICE = re.compile(rf'^(?P<name>.*?[A-Za-z].*?)\s+(?P<total>{AMOUNT})$', re.IGNORECASE)

# Stated receipt total (a SUBTOTAL line is not one)
TOTAL_LINE = re.compile(
    rf'^(?:grand\s+total|total(?:\s+(?:due|amount|sales))?|amount\s+due)\b\W*(?P<amount>{AMOUNT})\s*$',
    re.IGNORECASE,
)

SUMMARY_LINE = re.compile(
    r'^(?:sub\s*-?\s*total|grand\s+total|total|amount\s+due|cash|change|tendered|balance|discount'
    r'|vat(?:able)?|vat\s+exempt|zero\s+rated|tax|service\s+charge|items?\s+sold)\b',
    re.IGNORECASE,
)

NOISE_LINE = re.compile(
    r'^(?:tin|vat\s*reg|or\s*#|or\s+no|s\.?i\.?\s*no|receipt|invoice|thank|salamat|cashier|date|time'
    r'|tel|address|acct|customer|permit|min|sn|pos)\b',
    re.IGNORECASE,
)

DATE_LIKE = re.compile(r'\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b')

WHITESPACE = re.compile(r'\s+')
NON_LETTERS = re.compile(r'[^a-zñ\s]')

UNIT_ALIASES = {
    'kg': 'kg', 'kgs': 'kg', 'kilo': 'kg', 'kilos': 'kg',
    'g': 'g',
    'pc': 'pcs', 'pcs': 'pcs',
    'l': 'L', 'ltr': 'L',
    'ml': 'mL',
    'pack': 'pack', 'packs': 'pack', 'pck': 'pack',
    'bottle': 'bottle', 'bottles': 'bottle', 'btl': 'bottle',
    'can': 'can', 'cans': 'can',
    'bundle': 'bundle', 'bundles': 'bundle',
    'dozen': 'dozen', 'doz': 'dozen',
    'tray': 'tray', 'trays': 'tray',
    'sack': 'sack', 'sacks': 'sack',
}

# Purchase item type -> words that mark a stock item
INVENTORY_KEYWORDS = {
    'RAW_MATERIAL': [
        'pork', 'baboy', 'liempo', 'kasim', 'chicken', 'manok', 'beef', 'baka', 'fish', 'isda', 'bangus',
        'tilapia', 'galunggong', 'shrimp', 'hipon', 'squid', 'pusit', 'rice', 'bigas', 'flour', 'harina',
        'sugar', 'asukal', 'salt', 'asin', 'egg', 'itlog', 'oil', 'mantika', 'garlic', 'bawang', 'onion',
        'sibuyas', 'tomato', 'kamatis', 'toyo', 'soy sauce', 'vinegar', 'suka', 'pepper', 'paminta', 'milk',
        'gatas', 'butter', 'margarine', 'cheese', 'keso', 'noodles', 'pancit', 'bihon', 'canton', 'miki',
        'yeast', 'coconut', 'gata', 'calamansi', 'ginger', 'luya', 'potato', 'patatas', 'carrot', 'cabbage',
        'repolyo', 'pechay', 'kangkong', 'sitaw', 'ketchup', 'patis', 'bagoong', 'cornstarch', 'chocolate',
        'cocoa', 'vanilla', 'sardinas', 'corned', 'hotdog', 'longganisa', 'tocino', 'banana', 'saging',
    ],
    'PACKAGING': [
        'cup', 'cups', 'lid', 'lids', 'straw', 'straws', 'styro', 'styrofoam', 'container', 'containers',
        'plastic', 'sando', 'paper bag', 'box', 'boxes', 'wrapper', 'foil', 'cling wrap', 'napkin',
        'tissue', 'spoon', 'fork', 'utensils', 'chopsticks', 'label', 'sticker',
    ],
}

# Expense category -> words that mark a running cost
EXPENSE_KEYWORDS = {
    'UTILITIES': [
        'meralco', 'electric', 'electricity', 'kuryente', 'water bill', 'maynilad', 'manila water',
        'internet', 'pldt', 'globe', 'converge', 'smart', 'load', 'lpg', 'gasul', 'solane',
    ],
    'RENT': ['rent', 'upa', 'stall fee', 'lease'],
    'TRANSPORTATION': ['delivery', 'grab', 'lalamove', 'fare', 'pamasahe', 'gasoline', 'diesel', 'fuel',
                       'parking', 'toll'],
    'EQUIPMENT': ['blender', 'stove', 'freezer', 'refrigerator', 'oven', 'knife', 'kawali', 'caldero',
                  'steamer', 'griller', 'repair'],
    'MARKETING': ['flyer', 'flyers', 'tarpaulin', 'tarp', 'printing', 'ads', 'boost'],
    'LABOR': ['salary', 'wage', 'wages', 'sahod', 'helper', 'allowance'],
}
