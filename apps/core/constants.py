"""
Core Constants

Centralized values shared by the services.
"""
import re
from decimal import Decimal

# Money and rate precision
CENT = Decimal('0.01')
RATE_MIN = Decimal('0')
RATE_MAX = Decimal('100')

# Dashboard list sizes
DASHBOARD_RECENT_LEADS = 5

# Lead submission fields that must be present
LEAD_REQUIRED_FIELDS = [
    "customer_name",
    "customer_phone",
    "customer_email",
    "investment_type",
    "investment_amount",
]

# Registration fields that must be present
PRINCIPAL_REQUIRED_FIELDS = ["name", "email", "phone", "address", "role"]

# Loose email shape check; deliverability is not verified
EMAIL_PATTERN = re.compile(r'^\S+@\S+\.\S+$')

# Largest amount a Decimal(15, 2) column holds
MAX_AMOUNT = Decimal('9999999999999.99')
