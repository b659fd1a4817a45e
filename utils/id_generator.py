import uuid
from datetime import datetime


def _stamp() -> str:
    return f"{datetime.now().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:4]}"


def generate_collection_id() -> str:
    return f"col-{_stamp()}"


def generate_bulk_collection_id() -> str:
    return f"bulk-{_stamp()}"


def generate_custom_collection_id() -> str:
    return f"custom-{_stamp()}"


def generate_fund_id() -> str:
    return f"fund-{_stamp()}"


def generate_initial_fund_id() -> str:
    return f"initial-{_stamp()}"
