"""Initialize the default chart of accounts."""

import click
from tallybook.domain.account import AccountService
from tallybook.domain.errors import DomainError


# (code, name, type, parent code, category, normal balance override)
INITIAL_ACCOUNTS = [
    # Header accounts
    ("1000", "Assets", "asset", None, None, None),
    ("2000", "Liabilities", "liability", None, None, None),
    ("3000", "Equity", "equity", None, None, None),
    ("4000", "Revenue", "revenue", None, None, None),
    ("5000", "Expenses", "expense", None, None, None),
    # Assets
    ("1010", "Cash on Hand", "asset", "1000", "current", None),
    ("1020", "Business Checking Account", "asset", "1000", "current", None),
    ("1030", "Business Savings Account", "asset", "1000", "current", None),
    ("1040", "PayPal Account", "asset", "1000", "current", None),
    ("1110", "Trade Receivables", "asset", "1000", "current", None),
    ("1120", "Other Receivables", "asset", "1000", "current", None),
    ("1210", "Office Equipment", "asset", "1000", "non_current", None),
    ("1220", "Computers & Software", "asset", "1000", "non_current", None),
    ("1230", "Office Furniture", "asset", "1000", "non_current", None),
    ("1240", "Leasehold Improvements", "asset", "1000", "non_current", None),
    # Liabilities
    ("2010", "Trade Payables", "liability", "2000", "current", None),
    ("2020", "Office Supplies Payable", "liability", "2000", "current", None),
    ("2030", "Utilities Payable", "liability", "2000", "current", None),
    ("2110", "Credit Card Payable", "liability", "2000", "current", None),
    ("2120", "Line of Credit", "liability", "2000", "current", None),
    ("2210", "Business Loan", "liability", "2000", "non_current", None),
    ("2220", "Equipment Loan", "liability", "2000", "non_current", None),
    # Equity
    ("3010", "Owner Capital", "equity", "3000", "capital", None),
    ("3020", "Owner Drawings", "equity", "3000", "capital", "debit"),
    ("3030", "Retained Earnings", "equity", "3000", "retained", None),
    # Revenue
    ("4010", "Consulting Services", "revenue", "4000", "services", None),
    ("4020", "Design Services", "revenue", "4000", "services", None),
    ("4030", "Development Services", "revenue", "4000", "services", None),
    ("4110", "Software Sales", "revenue", "4000", "products", None),
    ("4120", "Hardware Sales", "revenue", "4000", "products", None),
    ("4210", "Late Fees", "revenue", "4000", "other", None),
    ("4220", "Interest Income", "revenue", "4000", "other", None),
    # Expenses
    ("5010", "Rent Expense", "expense", "5000", "operating", None),
    ("5020", "Utilities Expense", "expense", "5000", "operating", None),
    ("5030", "Office Supplies", "expense", "5000", "operating", None),
    ("5040", "Internet & Phone", "expense", "5000", "operating", None),
    ("5110", "Salaries & Wages", "expense", "5000", "operating", None),
    ("5120", "Payroll Taxes", "expense", "5000", "operating", None),
    ("5130", "Employee Benefits", "expense", "5000", "operating", None),
    ("5140", "Training & Development", "expense", "5000", "operating", None),
    ("5210", "Digital Marketing", "expense", "5000", "sales_marketing", None),
    ("5220", "Print Advertising", "expense", "5000", "sales_marketing", None),
    ("5230", "Trade Shows", "expense", "5000", "sales_marketing", None),
    ("5310", "Legal Fees", "expense", "5000", "administrative", None),
    ("5320", "Accounting Services", "expense", "5000", "administrative", None),
    ("5330", "Consulting Fees", "expense", "5000", "administrative", None),
    ("5410", "Software Subscriptions", "expense", "5000", "operating", None),
    ("5420", "Cloud Services", "expense", "5000", "operating", None),
    ("5430", "IT Support", "expense", "5000", "operating", None),
    ("5510", "Business Travel", "expense", "5000", "travel", None),
    ("5520", "Client Entertainment", "expense", "5000", "travel", None),
    ("5530", "Mileage Expense", "expense", "5000", "travel", None),
    ("5610", "Business Insurance", "expense", "5000", "administrative", None),
    ("5620", "Professional Licenses", "expense", "5000", "administrative", None),
    ("5710", "Bank Fees", "expense", "5000", "administrative", None),
    ("5720", "Credit Card Fees", "expense", "5000", "administrative", None),
    ("5730", "Loan Interest", "expense", "5000", "administrative", None),
]


@click.command("init-accounts")
@click.option("--force", is_flag=True, help="Add missing default accounts even if accounts exist")
@click.pass_context
def init_accounts(ctx, force: bool):
    """Initialize database with a default small-business chart of accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    # Check if accounts already exist
    existing = service.list_accounts()
    if existing and not force:
        click.echo("Accounts already exist. Use --force to add missing default accounts.")
        return

    click.echo("Creating default chart of accounts...")
    existing_codes = {acc.code for acc in existing}

    created = 0
    skipped = 0
    errors = 0

    # Header accounts come first in the list, so parents exist before children
    for code, name, account_type, parent_code, category, normal_balance in INITIAL_ACCOUNTS:
        if code in existing_codes:
            skipped += 1
            continue
        parent_id = None
        if parent_code is not None:
            parent = service.get_account_by_code(parent_code)
            parent_id = parent.id if parent else None
        try:
            service.create_account(
                code=code,
                name=name,
                account_type=account_type,
                normal_balance=normal_balance,
                parent_id=parent_id,
                category=category,
            )
            created += 1
        except DomainError as e:
            click.echo(f"Warning: Could not create account {code} '{name}': {e}", err=True)
            errors += 1

    message = f"Created {created} accounts"
    if skipped:
        message += f", skipped {skipped} existing"
    if errors:
        message += f" with {errors} errors"
    click.echo(message + ".")


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)
