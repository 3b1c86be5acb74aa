RMD_START_AGE = 73
# divisor = RMD_DIVISOR_BASE - age, a stand-in for the uniform lifetime table
RMD_DIVISOR_BASE = 115


def required_minimum_distribution(balance: float, age: int) -> float:
    """
    Required minimum distribution for a pre-tax balance at the given age.
      - zero before RMD_START_AGE
      - otherwise balance / max(1, RMD_DIVISOR_BASE - age)
    """
    if age < RMD_START_AGE or balance <= 0:
        return 0.0

    divisor = max(1, RMD_DIVISOR_BASE - age)
    return balance / divisor
