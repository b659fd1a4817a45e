import sys
from pathlib import Path

import click
import pandas as pd

from config.settings import (
    EXCEL_FILE, LOG_LEVEL, LOG_FORMAT, DEFAULT_COLLECTOR,
    DEFAULT_NEAR_CLOSING_DAYS, DEFAULT_PAYMENT_DELAY_DAYS, DEFAULT_STATEMENT_DAYS,
)
from core.aggregates import loans_to_frame
from core.exceptions import NotFoundError
from core.ledger import ledger_to_frame
from core.ledger_service import LedgerService
from data_manager.excel_export import default_export_name, export_workbook, generate_collection_statement
from data_manager.excel_handler import get_config, get_int_config
from data_manager.record_store import ExcelRecordStore
from utils.logger import setup_logging


def _service(data_file: str) -> LedgerService:
    path = Path(data_file)
    store = ExcelRecordStore(path)
    return LedgerService(
        store,
        near_closing_days=get_int_config("near_closing_days", DEFAULT_NEAR_CLOSING_DAYS, path),
        payment_delay_days=get_int_config("payment_delay_days", DEFAULT_PAYMENT_DELAY_DAYS, path),
        default_collector=get_config("default_collector", path) or DEFAULT_COLLECTOR,
    )


def _parse_day(value):
    return value.date() if value else None


def _fail(error):
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


DAY = click.DateTime(formats=['%Y-%m-%d'])

data_file_option = click.option(
    '--data-file', type=click.Path(dir_okay=False), default=str(EXCEL_FILE),
    show_default=True, help='Path to the ledger workbook')


@click.group()
@click.option('--log-level', type=str, default=LOG_LEVEL, help='Log level')
def cli(log_level):
    """A CLI for the lending ledger."""
    setup_logging(log_level, LOG_FORMAT)


@cli.command('list-loans')
@data_file_option
def list_loans(data_file):
    """Lists all loans with their derived balances."""
    loans = _service(data_file).get_derived_loans()
    click.echo(loans_to_frame(loans).to_string(index=False))


@cli.command('add-loan')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
@click.option('--customer-name', type=str, required=True, help='Customer name')
@click.option('--date', 'loan_date', type=str, help='Issue date (YYYY-MM-DD), defaults to today')
@click.option('--loan-amount', type=float, required=True, help='Face value owed')
@click.option('--deduction', type=float, default=0.0, help='Upfront fee withheld')
@click.option('--net-given', type=float, help='Cash actually disbursed, defaults to amount minus deduction')
@click.option('--daily-pay', type=float, required=True, help='Daily repayment')
@click.option('--days', type=int, required=True, help='Term in days')
def add_loan(data_file, loan_id, customer_name, loan_date, loan_amount, deduction, net_given, daily_pay, days):
    """Adds a new loan."""
    loan, error = _service(data_file).add_loan({
        'id': loan_id,
        'customer_name': customer_name,
        'date': loan_date,
        'loan_amount': loan_amount,
        'deduction': deduction,
        'net_given': net_given,
        'daily_pay': daily_pay,
        'days': days,
    })
    if error:
        _fail(error)
    click.echo(f"Loan '{loan.id}' added: balance {loan.balance:,.2f}, status {loan.status.value}")


@cli.command('update-loan')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
@click.option('--customer-name', type=str, help='Customer name')
@click.option('--date', 'loan_date', type=str, help='Issue date (YYYY-MM-DD)')
@click.option('--loan-amount', type=float, help='Face value owed')
@click.option('--deduction', type=float, help='Upfront fee withheld')
@click.option('--net-given', type=float, help='Cash actually disbursed')
@click.option('--daily-pay', type=float, help='Daily repayment')
@click.option('--days', type=int, help='Term in days')
def update_loan(data_file, loan_id, customer_name, loan_date, loan_amount, deduction, net_given, daily_pay, days):
    """Updates fields of an existing loan."""
    partial = {
        'customer_name': customer_name,
        'date': loan_date,
        'loan_amount': loan_amount,
        'deduction': deduction,
        'net_given': net_given,
        'daily_pay': daily_pay,
        'days': days,
    }
    partial = {k: v for k, v in partial.items() if v is not None}
    loan, error = _service(data_file).update_loan(loan_id, partial)
    if error:
        _fail(error)
    click.echo(f"Loan '{loan.id}' updated: balance {loan.balance:,.2f}, status {loan.status.value}")


@cli.command('delete-loan')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
def delete_loan(data_file, loan_id):
    """Deletes a loan and all of its collections."""
    removed, error = _service(data_file).delete_loan(loan_id)
    if error:
        _fail(error)
    click.echo(f"Loan '{loan_id}' deleted with {removed} collection(s).")


@cli.command('toggle-loan')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
def toggle_loan(data_file, loan_id):
    """Disables an enabled loan, or enables a disabled one."""
    loan, error = _service(data_file).toggle_loan(loan_id)
    if error:
        _fail(error)
    click.echo(f"Loan '{loan.id}' is now {loan.status.value}.")


@cli.command('add-collection')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
@click.option('--amount', type=float, required=True, help='Amount paid')
@click.option('--date', 'collection_date', type=str, help='Collection date (YYYY-MM-DD), defaults to today')
@click.option('--collected-by', type=str, default='', help='Collector')
@click.option('--remarks', type=str, default='', help='Remarks')
def add_collection(data_file, loan_id, amount, collection_date, collected_by, remarks):
    """Records a daily collection."""
    collection, error = _service(data_file).add_collection({
        'loan_id': loan_id,
        'amount_paid': amount,
        'date': collection_date,
        'collected_by': collected_by,
        'remarks': remarks,
    })
    if error:
        _fail(error)
    click.echo(f"Collection '{collection.id}' of {collection.amount_paid:,.2f} recorded for loan '{loan_id}'.")


@cli.command('bulk-collect')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
@click.option('--mode', type=click.Choice(['full', 'custom']), default='full', help='Settle the balance or collect a custom amount')
@click.option('--amount', type=float, help='Custom amount')
@click.option('--collected-by', type=str, help='Collector')
@click.option('--remarks', type=str, help='Remarks')
def bulk_collect(data_file, loan_id, mode, amount, collected_by, remarks):
    """Collects the remaining balance, or a custom amount, in one entry."""
    service = _service(data_file)
    collection, error = service.submit_bulk_collection(loan_id, mode, amount, collected_by, remarks)
    if error:
        _fail(error)
    loan = service.get_loan(loan_id)
    click.echo(f"Collected {collection.amount_paid:,.2f} from loan '{loan_id}'. "
               f"Balance {loan.balance:,.2f}, status {loan.status.value}.")


@cli.command('add-fund')
@data_file_option
@click.option('--description', type=str, required=True, help='Description')
@click.option('--inflow', type=float, default=0.0, help='Inflow')
@click.option('--outflow', type=float, default=0.0, help='Outflow')
@click.option('--date', 'fund_date', type=str, help='Entry date (YYYY-MM-DD), defaults to today')
def add_fund(data_file, description, inflow, outflow, fund_date):
    """Records a manual cash entry."""
    fund, error = _service(data_file).add_fund({
        'description': description,
        'inflow': inflow,
        'outflow': outflow,
        'date': fund_date,
    })
    if error:
        _fail(error)
    click.echo(f"Fund entry '{fund.id}' recorded.")


@cli.command('set-initial-balance')
@data_file_option
@click.option('--amount', type=float, required=True, help='Opening cash balance')
@click.option('--date', 'fund_date', type=DAY, help='Opening date (YYYY-MM-DD), defaults to today')
def set_initial_balance(data_file, amount, fund_date):
    """Records the opening cash balance."""
    fund, error = _service(data_file).set_initial_balance(amount, _parse_day(fund_date))
    if error:
        _fail(error)
    click.echo(f"Initial balance {fund.inflow:,.2f} recorded.")


@cli.command('ledger')
@data_file_option
@click.option('--csv', 'as_csv', is_flag=True, help='Output as CSV')
def ledger(data_file, as_csv):
    """Shows the unified cash ledger with running balances."""
    service = _service(data_file)
    df = ledger_to_frame(service.get_ledger())
    if as_csv:
        click.echo(df.to_csv(index=False))
        return
    click.echo(df.to_string(index=False))
    summary = service.get_ledger_summary()
    click.echo(f"Current balance: {summary['current_balance']:,.2f}")
    click.echo(f"Negative balance rows: {summary['negative_balance_rows']}")


@cli.command('report')
@data_file_option
@click.option('--as-of', type=DAY, help='Report date (YYYY-MM-DD), defaults to today')
def report(data_file, as_of):
    """Shows portfolio totals, rates and warnings."""
    rep = _service(data_file).get_aggregate_report(_parse_day(as_of))
    click.echo(pd.Series(rep.to_dict()).to_string())
    for item in rep.near_closing:
        click.echo(f"Near closing: {item.loan.id} {item.loan.customer_name} "
                   f"({item.remaining_amount:,.2f} left, {item.remaining_days} day(s))")
    for item in rep.payment_delayed:
        click.echo(f"Payment delayed: {item.loan.id} {item.loan.customer_name} "
                   f"({item.days_since_payment} day(s) since {item.last_activity.isoformat()})")


@cli.command('cash-flow')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
def cash_flow(data_file, loan_id):
    """Shows the customer statement for one loan."""
    flow, error = _service(data_file).get_loan_cash_flow(loan_id)
    if error:
        _fail(error)
    click.echo(f"Disbursed: {flow['total_outflow']:,.2f}")
    click.echo(f"Collected: {flow['total_inflow']:,.2f}")
    click.echo(f"Net flow: {flow['net_flow']:,.2f}")
    click.echo(f"Profit: {flow['profit']:,.2f}")
    for c in flow['collections']:
        click.echo(f"{c.date.isoformat()}  {c.amount_paid:>12,.2f}  {c.collected_by}  {c.remarks}")


@cli.command('statement')
@data_file_option
@click.option('--loan-id', type=str, required=True, help='Loan ID')
@click.option('--start-date', type=DAY, help='First day (YYYY-MM-DD), defaults to today')
@click.option('--days', type=int, default=DEFAULT_STATEMENT_DAYS, help='Number of days')
def statement(data_file, loan_id, start_date, days):
    """Prints the daily collection statement for a loan as CSV."""
    try:
        loan = _service(data_file).get_loan(loan_id)
    except NotFoundError as e:
        _fail(e)
    click.echo(generate_collection_statement(loan, _parse_day(start_date), days).to_csv(index=False))


@cli.command('export')
@data_file_option
@click.option('--output', type=click.Path(dir_okay=False), help='Output workbook path')
def export(data_file, output):
    """Exports loans, collections, funds and the ledger to Excel."""
    service = _service(data_file)
    path = export_workbook(
        service.get_derived_loans(),
        service.list_collections(),
        service.list_funds(),
        service.get_ledger(),
        Path(output or default_export_name()),
    )
    click.echo(f"Exported to {path}")


if __name__ == '__main__':
    cli()
