from typing import Dict, Optional

# Flat approximations; bracket tables are intentionally not modeled.
ORDINARY_INCOME_RATE = 0.15
TAXABLE_WITHDRAWAL_RATE = 0.15

PRETAX = "pretax"
TAXABLE = "taxable"
ROTH_FREE = "roth_free"
CASH = "cash"


class FlatTaxCalculator:
    """
    Flat withdrawal tax by bucket tax treatment.
      - pretax:    ordinary-income rate on withdrawals and RMDs
      - taxable:   partial rate approximating basis and gains
      - roth_free: untaxed
      - cash:      untaxed
    """

    TAX_RATES: Dict[str, float] = {
        PRETAX: ORDINARY_INCOME_RATE,
        TAXABLE: TAXABLE_WITHDRAWAL_RATE,
        ROTH_FREE: 0.0,
        CASH: 0.0,
    }

    def __init__(self, rates: Optional[Dict[str, float]] = None):
        self.rates = dict(self.TAX_RATES)
        if rates:
            self.rates.update(rates)

    def rate_for(self, treatment: str) -> float:
        if treatment not in self.rates:
            raise ValueError(f"Unknown tax treatment: {treatment}")
        return self.rates[treatment]

    def gross_up(self, net_need: float, treatment: str) -> float:
        """Gross withdrawal whose after-tax proceeds equal net_need."""
        return net_need / (1 - self.rate_for(treatment))

    def tax_on(self, gross: float, treatment: str) -> float:
        return gross * self.rate_for(treatment)

    def is_taxable(self, treatment: str) -> bool:
        return self.rate_for(treatment) > 0
