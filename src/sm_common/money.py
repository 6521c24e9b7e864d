"""Integer arithmetic for amounts in the smallest currency unit (XOF has no minor unit).

All prices, amounts, commissions and balances are int. No float, no Decimal.
"""


def validate_amount(amount: int) -> None:
    """Validate that an amount is a strictly positive integer."""
    if amount <= 0:
        raise ValueError(f"Amount must be positive, got {amount}")


def calc_commission(amount: int, rate_bps: int) -> int:
    """Commission with round-half-up division.

    commission = round_half_up(amount * rate_bps / 10000)
    Using integer arithmetic: (a * r + 5000) // 10000
    """
    if amount == 0 or rate_bps == 0:
        return 0
    return (amount * rate_bps + 5000) // 10000


def split_amount(amount: int, rate_bps: int) -> tuple[int, int]:
    """Return (commission, payout); commission + payout == amount always holds."""
    commission = calc_commission(amount, rate_bps)
    return commission, amount - commission


def amount_to_display(amount: int, currency: str = "FCFA") -> str:
    """Convert an amount to display string: 25000 -> '25,000 FCFA'."""
    if amount < 0:
        return f"-{-amount:,} {currency}"
    return f"{amount:,} {currency}"
