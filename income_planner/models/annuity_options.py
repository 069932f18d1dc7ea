"""
Annuity conversion option resolution.

Normalizes each conversion option's effective annual payout and decides
whether the option takes part in projections and simulations.
"""

from typing import Dict, List, Tuple

from .household import AlignOption


def effective_annual_payout(option: AlignOption) -> float:
    """Effective annual payout for a conversion option.

    Rate-based products pay ``premium * rate%`` every year; the quoted rate is
    assumed to hold for the whole projection, so the term is informational.
    Fixed-payout products pay their flat amount with no COLA.
    """
    if option.product_type == "rate_based":
        return option.premium_amount * (option.guaranteed_rate_pct / 100)
    return option.payout_amount


def is_option_valid(option: AlignOption) -> bool:
    """An option is valid when it has a premium and a positive payout."""
    if option.premium_amount <= 0:
        return False
    return effective_annual_payout(option) > 0


def valid_options(options: List[AlignOption]) -> List[AlignOption]:
    """Return the options that take part in downstream computations."""
    return [option for option in options if is_option_valid(option)]


def premium_deductions(options: List[AlignOption]) -> Dict[Tuple[str, str], float]:
    """Sum valid option premiums by (category, owner) bucket.

    Premiums are attributed to the spouse's bucket only for spouse-owned
    options; client and joint options draw on the client's bucket.
    """
    deductions: Dict[Tuple[str, str], float] = {}
    for option in valid_options(options):
        key = (option.referenced_category, option.deduction_owner)
        deductions[key] = deductions.get(key, 0.0) + option.premium_amount
    return deductions


def survives_client_death(option: AlignOption) -> bool:
    """Whether payouts continue after the client's death.

    Only client-owned, single-life, fixed-payout contracts stop.
    """
    return not (
        option.owner == "client"
        and option.product_type == "fixed_payout"
        and option.benefit_option == "single_life"
    )
