"""Static category taxonomy.

The taxonomy is an immutable table of category definitions shared by the
categorization engine and anything that needs human-readable labels.
Entries are never removed: categories that were renamed over time are
resolved through LEGACY_ALIASES at read time, so historical transactions
keep pointing at a valid entry.
"""

import re
from dataclasses import dataclass, field

from txnflow.schemas.internal import BudgetType, LedgerType

INCOME_FALLBACK = ("Income", None)
UNCATEGORIZED_FALLBACK = ("Uncategorized", None)

LABEL_SEPARATOR = " > "


def slugify(text: str) -> str:
    text = text.lower().replace("&", " and ").replace("+", " plus ")
    return re.sub(r"[^a-z0-9]+", "-", text).strip("-")


def category_id_for(name: str, subcategory: str | None = None) -> str:
    """Stable id for a (name, subcategory) pair, e.g. "food-and-drink.coffee-shops"."""
    if subcategory:
        return f"{slugify(name)}.{slugify(subcategory)}"
    return slugify(name)


@dataclass(frozen=True)
class CategoryDefinition:
    """A single taxonomy entry."""

    id: str
    name: str
    subcategory: str | None
    ledger_type: LedgerType
    budget_type: BudgetType
    external_primary: str | None = None
    external_detailed: str | None = None
    keywords: tuple[str, ...] = field(default_factory=tuple)

    @property
    def display_name(self) -> str:
        if self.subcategory:
            return f"{self.name}{LABEL_SEPARATOR}{self.subcategory}"
        return self.name


def _entry(
    name: str,
    subcategory: str | None = None,
    ledger: LedgerType = LedgerType.EXPENSE,
    budget: BudgetType = BudgetType.FLEXIBLE,
    primary: str | None = None,
    detailed: str | None = None,
    keywords: tuple[str, ...] = (),
) -> CategoryDefinition:
    return CategoryDefinition(
        id=category_id_for(name, subcategory),
        name=name,
        subcategory=subcategory,
        ledger_type=ledger,
        budget_type=budget,
        external_primary=primary,
        external_detailed=detailed,
        keywords=keywords,
    )


_INC = LedgerType.INCOME
_T = LedgerType.TRANSFER
_FIXED = BudgetType.FIXED
_NM = BudgetType.NON_MONTHLY

# Table order matters: primary-code lookups and keyword scans return the
# first matching entry, so parents precede their subcategories.
CATEGORIES: tuple[CategoryDefinition, ...] = (
    # Auto & Transport
    _entry("Auto & Transport", primary="TRANSPORTATION"),
    _entry("Auto & Transport", "Gas", primary="TRANSPORTATION", detailed="TRANSPORTATION_GAS",
           keywords=("gas station", "fuel", "gasoline")),
    _entry("Auto & Transport", "Public Transit", primary="TRANSPORTATION",
           detailed="TRANSPORTATION_PUBLIC_TRANSIT", keywords=("transit", "subway", "metro card")),
    _entry("Auto & Transport", "Parking", primary="TRANSPORTATION",
           detailed="TRANSPORTATION_PARKING", keywords=("parking",)),
    _entry("Auto & Transport", "Tolls", primary="TRANSPORTATION",
           detailed="TRANSPORTATION_TOLLS", keywords=("toll road", "fastrak", "ezpass")),
    _entry("Auto & Transport", "Taxi & Rideshare", primary="TRANSPORTATION",
           detailed="TRANSPORTATION_TAXIS_AND_RIDE_SHARES", keywords=("taxi", "rideshare")),
    _entry("Auto & Transport", "Bikes & Scooters", primary="TRANSPORTATION",
           detailed="TRANSPORTATION_BIKES_AND_SCOOTERS"),
    # Bank Fees
    _entry("Bank Fees", primary="BANK_FEES"),
    _entry("Bank Fees", "ATM Fees", primary="BANK_FEES", detailed="BANK_FEES_ATM_FEES",
           keywords=("atm fee",)),
    _entry("Bank Fees", "Overdraft Fees", primary="BANK_FEES",
           detailed="BANK_FEES_OVERDRAFT_FEES", keywords=("overdraft",)),
    _entry("Bank Fees", "Interest Charged", ledger=LedgerType.DEBT_INTEREST, primary="BANK_FEES",
           detailed="BANK_FEES_INTEREST_CHARGE",
           keywords=("interest charge", "finance charge", "loan interest", "mortgage interest")),
    _entry("Bank Fees", "Other Bank Fees", primary="BANK_FEES",
           detailed="BANK_FEES_OTHER_BANK_FEES", keywords=("service charge", "monthly fee")),
    # Entertainment
    _entry("Entertainment", primary="ENTERTAINMENT"),
    _entry("Entertainment", "Movies & TV", primary="ENTERTAINMENT",
           detailed="ENTERTAINMENT_TV_AND_MOVIES", keywords=("cinema", "movie theater", "amc ")),
    _entry("Entertainment", "Music & Audio", primary="ENTERTAINMENT",
           detailed="ENTERTAINMENT_MUSIC_AND_AUDIO", keywords=("concert",)),
    _entry("Entertainment", "Events & Attractions", primary="ENTERTAINMENT",
           detailed="ENTERTAINMENT_SPORTING_EVENTS_AMUSEMENT_PARKS_AND_MUSEUMS",
           keywords=("ticketmaster", "stadium", "museum")),
    _entry("Entertainment", "Video Games", primary="ENTERTAINMENT",
           detailed="ENTERTAINMENT_VIDEO_GAMES", keywords=("playstation", "xbox", "nintendo")),
    # Family Care
    _entry("Family Care"),
    _entry("Family Care", "Childcare", detailed="GENERAL_SERVICES_CHILDCARE",
           keywords=("daycare", "childcare", "babysit")),
    # Food & Drink
    _entry("Food & Drink", primary="FOOD_AND_DRINK"),
    _entry("Food & Drink", "Restaurants", primary="FOOD_AND_DRINK",
           detailed="FOOD_AND_DRINK_RESTAURANT", keywords=("restaurant", "cafe", "diner", "pizza")),
    _entry("Food & Drink", "Coffee Shops", primary="FOOD_AND_DRINK",
           detailed="FOOD_AND_DRINK_COFFEE", keywords=("coffee", "espresso")),
    _entry("Food & Drink", "Fast Food", primary="FOOD_AND_DRINK",
           detailed="FOOD_AND_DRINK_FAST_FOOD", keywords=("drive thru", "mcdonald")),
    _entry("Food & Drink", "Alcohol & Bars", primary="FOOD_AND_DRINK",
           detailed="FOOD_AND_DRINK_BEER_WINE_AND_LIQUOR", keywords=("liquor", "brewery", "wine bar")),
    _entry("Food & Drink", "Vending Machines", primary="FOOD_AND_DRINK",
           detailed="FOOD_AND_DRINK_VENDING_MACHINES", keywords=("vending",)),
    # General Services
    _entry("General Services", primary="GENERAL_SERVICES"),
    _entry("General Services", "Insurance", primary="GENERAL_SERVICES",
           detailed="GENERAL_SERVICES_INSURANCE", keywords=("insurance", "geico")),
    _entry("General Services", "Postage & Shipping", primary="GENERAL_SERVICES",
           detailed="GENERAL_SERVICES_POSTAGE_AND_SHIPPING", keywords=("usps", "fedex", "ups store")),
    _entry("General Services", "Storage", primary="GENERAL_SERVICES",
           detailed="GENERAL_SERVICES_STORAGE", keywords=("self storage",)),
    _entry("General Services", "Automotive Services", primary="GENERAL_SERVICES",
           detailed="GENERAL_SERVICES_AUTOMOTIVE", keywords=("auto repair", "oil change", "jiffy lube")),
    # Gifts
    _entry("Gifts", detailed="GENERAL_MERCHANDISE_GIFTS_AND_NOVELTIES", keywords=("gift shop",)),
    # Government & Non-Profit
    _entry("Government & Non-Profit", primary="GOVERNMENT_AND_NON_PROFIT"),
    _entry("Government & Non-Profit", "Government Services", primary="GOVERNMENT_AND_NON_PROFIT",
           detailed="GOVERNMENT_AND_NON_PROFIT_GOVERNMENT_DEPARTMENTS_AND_AGENCIES",
           keywords=("dmv", "passport")),
    # Groceries
    _entry("Groceries", detailed="FOOD_AND_DRINK_GROCERIES",
           keywords=("grocery", "supermarket", "trader joe", "whole foods")),
    # Health & Wellness
    _entry("Health & Wellness"),
    _entry("Health & Wellness", "Gym & Fitness", detailed="PERSONAL_CARE_GYMS_AND_FITNESS_CENTERS",
           keywords=("fitness", "gym ", "yoga")),
    # Home & Garden
    _entry("Home & Garden", primary="HOME_IMPROVEMENT"),
    _entry("Home & Garden", "Hardware", primary="HOME_IMPROVEMENT",
           detailed="HOME_IMPROVEMENT_HARDWARE", keywords=("home depot", "lowes", "hardware")),
    _entry("Home & Garden", "Furniture", primary="HOME_IMPROVEMENT",
           detailed="HOME_IMPROVEMENT_FURNITURE", keywords=("ikea", "furniture")),
    _entry("Home & Garden", "Repair & Maintenance", primary="HOME_IMPROVEMENT",
           detailed="HOME_IMPROVEMENT_REPAIR_AND_MAINTENANCE", keywords=("plumbing", "handyman")),
    # Medical & Healthcare
    _entry("Medical & Healthcare", primary="MEDICAL"),
    _entry("Medical & Healthcare", "Pharmacy", primary="MEDICAL",
           detailed="MEDICAL_PHARMACIES_AND_SUPPLEMENTS", keywords=("pharmacy", "walgreens", "cvs pharmacy")),
    _entry("Medical & Healthcare", "Doctor", primary="MEDICAL", detailed="MEDICAL_PRIMARY_CARE",
           keywords=("clinic", "medical", "physician")),
    _entry("Medical & Healthcare", "Dentist", primary="MEDICAL", detailed="MEDICAL_DENTAL_CARE",
           keywords=("dental", "dentist")),
    _entry("Medical & Healthcare", "Eye Care", primary="MEDICAL", detailed="MEDICAL_EYE_CARE",
           keywords=("optometr", "eyewear")),
    # Personal Care
    _entry("Personal Care", primary="PERSONAL_CARE"),
    _entry("Personal Care", "Hair & Beauty", primary="PERSONAL_CARE",
           detailed="PERSONAL_CARE_HAIR_AND_BEAUTY", keywords=("salon", "barber", "day spa")),
    _entry("Personal Care", "Laundry & Dry Cleaning", primary="PERSONAL_CARE",
           detailed="PERSONAL_CARE_LAUNDRY_AND_DRY_CLEANING", keywords=("laundry", "dry clean")),
    # Pets
    _entry("Pets", detailed="GENERAL_MERCHANDISE_PET_SUPPLIES",
           keywords=("petco", "petsmart", "veterinar")),
    # Shopping
    _entry("Shopping", primary="GENERAL_MERCHANDISE"),
    _entry("Shopping", "Clothing", primary="GENERAL_MERCHANDISE",
           detailed="GENERAL_MERCHANDISE_CLOTHING_AND_ACCESSORIES", keywords=("clothing", "apparel")),
    _entry("Shopping", "Electronics", primary="GENERAL_MERCHANDISE",
           detailed="GENERAL_MERCHANDISE_ELECTRONICS", keywords=("electronics",)),
    _entry("Shopping", "Department Stores", primary="GENERAL_MERCHANDISE",
           detailed="GENERAL_MERCHANDISE_DEPARTMENT_STORES", keywords=("macys", "nordstrom", "kohls")),
    _entry("Shopping", "Online Marketplaces", primary="GENERAL_MERCHANDISE",
           detailed="GENERAL_MERCHANDISE_ONLINE_MARKETPLACES", keywords=("marketplace",)),
    _entry("Shopping", "Superstores", primary="GENERAL_MERCHANDISE",
           detailed="GENERAL_MERCHANDISE_SUPERSTORES"),
    _entry("Shopping", "Convenience Stores", primary="GENERAL_MERCHANDISE",
           detailed="GENERAL_MERCHANDISE_CONVENIENCE_STORES", keywords=("7-eleven", "convenience")),
    # Software & Tech
    _entry("Software & Tech", keywords=("software", "github", "aws ")),
    # Travel & Vacation
    _entry("Travel & Vacation", primary="TRAVEL"),
    _entry("Travel & Vacation", "Flights", primary="TRAVEL", detailed="TRAVEL_FLIGHTS",
           keywords=("airline", "airways")),
    _entry("Travel & Vacation", "Lodging", primary="TRAVEL", detailed="TRAVEL_LODGING",
           keywords=("hotel", "airbnb", "motel")),
    _entry("Travel & Vacation", "Rental Cars", primary="TRAVEL", detailed="TRAVEL_RENTAL_CARS",
           keywords=("hertz", "avis ", "car rental")),
    # Income
    _entry("Income", ledger=_INC, budget=_NM, primary="INCOME",
           keywords=("payroll", "salary", "direct deposit")),
    _entry("Income", "Paychecks", ledger=_INC, budget=_NM, primary="INCOME",
           detailed="INCOME_WAGES", keywords=("paycheck", "wages")),
    _entry("Income", "Interest", ledger=_INC, budget=_NM, primary="INCOME",
           detailed="INCOME_INTEREST_EARNED", keywords=("interest earned", "interest paid")),
    _entry("Income", "Dividends", ledger=_INC, budget=_NM, primary="INCOME",
           detailed="INCOME_DIVIDENDS", keywords=("dividend",)),
    _entry("Income", "Retirement", ledger=_INC, budget=_NM, primary="INCOME",
           detailed="INCOME_RETIREMENT_PENSION", keywords=("pension",)),
    _entry("Income", "Tax Refund", ledger=_INC, budget=_NM, primary="INCOME",
           detailed="INCOME_TAX_REFUND", keywords=("tax refund", "irs treas")),
    _entry("Income", "Unemployment", ledger=_INC, budget=_NM, primary="INCOME",
           detailed="INCOME_UNEMPLOYMENT"),
    _entry("Income", "Other Income", ledger=_INC, budget=_NM, primary="INCOME",
           detailed="INCOME_OTHER_INCOME", keywords=("freelance", "consulting")),
    # Bills & Utilities
    _entry("Bills & Utilities", budget=_FIXED, primary="RENT_AND_UTILITIES"),
    _entry("Bills & Utilities", "Rent", budget=_FIXED, primary="RENT_AND_UTILITIES",
           detailed="RENT_AND_UTILITIES_RENT", keywords=("rent payment", "lease payment")),
    _entry("Bills & Utilities", "Gas & Electric", budget=_FIXED, primary="RENT_AND_UTILITIES",
           detailed="RENT_AND_UTILITIES_GAS_AND_ELECTRICITY",
           keywords=("electric bill", "electricity", "pg&e")),
    _entry("Bills & Utilities", "Internet & Cable", budget=_FIXED, primary="RENT_AND_UTILITIES",
           detailed="RENT_AND_UTILITIES_INTERNET_AND_CABLE", keywords=("internet", "comcast")),
    _entry("Bills & Utilities", "Phone", budget=_FIXED, primary="RENT_AND_UTILITIES",
           detailed="RENT_AND_UTILITIES_TELEPHONE", keywords=("phone bill", "cellular", "wireless")),
    _entry("Bills & Utilities", "Water", budget=_FIXED, primary="RENT_AND_UTILITIES",
           detailed="RENT_AND_UTILITIES_WATER", keywords=("water bill",)),
    _entry("Bills & Utilities", "Trash & Sewer", budget=_FIXED, primary="RENT_AND_UTILITIES",
           detailed="RENT_AND_UTILITIES_SEWAGE_AND_WASTE_MANAGEMENT",
           keywords=("waste management",)),
    _entry("Bills & Utilities", "Streaming", budget=_FIXED, keywords=("subscription",)),
    # Other expense families
    _entry("Legal", budget=_NM, keywords=("attorney", "law office")),
    _entry("Education", detailed="GENERAL_SERVICES_EDUCATION",
           keywords=("tuition", "university", "college")),
    _entry("Taxes", budget=_NM, detailed="GOVERNMENT_AND_NON_PROFIT_TAX_PAYMENT",
           keywords=("tax payment", "franchise tax")),
    _entry("Donations", detailed="GOVERNMENT_AND_NON_PROFIT_DONATIONS",
           keywords=("donation", "charity")),
    # Transfers and debt
    _entry("Transfers", ledger=_T, budget=_NM, primary="TRANSFER_OUT",
           keywords=("transfer", "zelle", "venmo")),
    _entry("Transfers", "Transfer In", ledger=_T, budget=_NM, primary="TRANSFER_IN",
           detailed="TRANSFER_IN_ACCOUNT_TRANSFER"),
    _entry("Transfers", "Transfer Out", ledger=_T, budget=_NM, primary="TRANSFER_OUT",
           detailed="TRANSFER_OUT_ACCOUNT_TRANSFER"),
    _entry("Credit Card Payment", ledger=_T, budget=_NM,
           detailed="LOAN_PAYMENTS_CREDIT_CARD_PAYMENT",
           keywords=("credit card", "applecard", "visa payment", "mastercard payment")),
    _entry("Loan Payments", ledger=_T, budget=_FIXED, primary="LOAN_PAYMENTS"),
    _entry("Loan Payments", "Mortgage", ledger=LedgerType.DEBT_PRINCIPAL, budget=_FIXED,
           primary="LOAN_PAYMENTS", detailed="LOAN_PAYMENTS_MORTGAGE_PAYMENT",
           keywords=("mortgage",)),
    _entry("Loan Payments", "Student Loan", ledger=LedgerType.DEBT_PRINCIPAL, budget=_FIXED,
           primary="LOAN_PAYMENTS", detailed="LOAN_PAYMENTS_STUDENT_LOAN_PAYMENT",
           keywords=("student loan", "navient")),
    _entry("Loan Payments", "Car Loan", ledger=LedgerType.DEBT_PRINCIPAL, budget=_FIXED,
           primary="LOAN_PAYMENTS", detailed="LOAN_PAYMENTS_CAR_PAYMENT",
           keywords=("auto loan", "car payment", "loan principal")),
    # Fallbacks and adjustments
    _entry("Uncategorized", budget=_NM),
    _entry("Reimbursement", ledger=LedgerType.ADJUSTMENT, budget=_NM,
           keywords=("reimbursement", "expense report")),
    _entry("Reimbursement", "Refunds", ledger=LedgerType.ADJUSTMENT, budget=_NM,
           keywords=("refund", "chargeback", "dispute")),
    _entry("Savings Transfer", ledger=_T, budget=_NM, keywords=("savings",)),
    _entry("Investment", ledger=_T, budget=_NM, keywords=("brokerage", "vanguard", "robinhood")),
)

# (old name, old subcategory) -> (current name, current subcategory)
LEGACY_ALIASES: dict[tuple[str, str | None], tuple[str, str | None]] = {
    ("Food & Dining", None): ("Food & Drink", None),
    ("Dining", None): ("Food & Drink", "Restaurants"),
    ("Transport", None): ("Auto & Transport", None),
    ("Auto & Transport", "Taxi & Ride Shares"): ("Auto & Transport", "Taxi & Rideshare"),
    ("Other", None): ("Uncategorized", None),
    ("Healthcare", None): ("Medical & Healthcare", None),
    ("Utilities", None): ("Bills & Utilities", None),
    ("Subscriptions", None): ("Bills & Utilities", "Streaming"),
    ("To Savings", None): ("Savings Transfer", None),
    ("Refund", None): ("Reimbursement", "Refunds"),
    ("Salary", None): ("Income", "Paychecks"),
}


def _key(name: str, subcategory: str | None) -> tuple[str, str | None]:
    return name.strip().casefold(), subcategory.strip().casefold() if subcategory else None


class Taxonomy:
    """Read-only lookup over a category table and its legacy aliases.

    Example:
        >>> taxonomy = get_taxonomy()
        >>> taxonomy.find("Dining").display_name
        'Food & Drink > Restaurants'
    """

    def __init__(
        self,
        entries: tuple[CategoryDefinition, ...] = CATEGORIES,
        aliases: dict[tuple[str, str | None], tuple[str, str | None]] | None = None,
    ):
        self._entries = tuple(entries)
        self._by_id = {entry.id: entry for entry in self._entries}
        self._by_name = {_key(e.name, e.subcategory): e for e in self._entries}
        self._aliases = {
            _key(*old): new for old, new in (LEGACY_ALIASES if aliases is None else aliases).items()
        }

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[CategoryDefinition, ...]:
        return self._entries

    def get(self, category_id: str | None) -> CategoryDefinition | None:
        if not category_id:
            return None
        return self._by_id.get(category_id)

    def resolve_alias(self, name: str, subcategory: str | None = None) -> tuple[str, str | None]:
        """Map a legacy (name, subcategory) pair onto its current name."""
        return self._aliases.get(_key(name, subcategory), (name, subcategory))

    def find(self, name: str | None, subcategory: str | None = None) -> CategoryDefinition | None:
        """Find an entry by (possibly legacy) name and subcategory, case-insensitive."""
        if not name or not name.strip():
            return None
        current_name, current_sub = self.resolve_alias(name, subcategory)
        return self._by_name.get(_key(current_name, current_sub))

    def find_by_label(self, label: str | None) -> CategoryDefinition | None:
        """Find an entry by display label ("Parent > Sub" or a bare name)."""
        if not label:
            return None
        name, _, subcategory = label.partition(LABEL_SEPARATOR.strip())
        return self.find(name.strip(), subcategory.strip() or None)

    def by_external_detailed(self, code: str | None) -> CategoryDefinition | None:
        if not code:
            return None
        code = code.strip().upper()
        return next((e for e in self._entries if e.external_detailed == code), None)

    def by_external_primary(self, code: str | None) -> CategoryDefinition | None:
        if not code:
            return None
        code = code.strip().upper()
        return next((e for e in self._entries if e.external_primary == code), None)

    def income_fallback(self) -> CategoryDefinition | None:
        return self.find(*INCOME_FALLBACK)

    def uncategorized_fallback(self) -> CategoryDefinition | None:
        return self.find(*UNCATEGORIZED_FALLBACK)

    def fallback_for(self, signed_amount) -> CategoryDefinition | None:
        """Income for inflows, Uncategorized for everything else."""
        if signed_amount is not None and signed_amount > 0:
            return self.income_fallback()
        return self.uncategorized_fallback()


_taxonomy = Taxonomy()


def get_taxonomy() -> Taxonomy:
    """Get the shared default Taxonomy instance."""
    return _taxonomy
