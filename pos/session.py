"""Operator identity handed over by the external login/session layer."""

from __future__ import annotations

import os

from pos.config import DEFAULT_CASHIER_ID, DEFAULT_CASHIER_NAME
from pos.models import Operator


def current_operator() -> Operator:
    """Resolve the signed-in cashier from the session environment."""
    cashier_id = os.environ.get("POS_CASHIER_ID", "").strip() or DEFAULT_CASHIER_ID
    display_name = os.environ.get("POS_CASHIER_NAME", "").strip() or DEFAULT_CASHIER_NAME
    return Operator(cashier_id=cashier_id, display_name=display_name)
