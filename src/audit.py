import pandas as pd

FLOW_COLUMNS = ["year", "age", "source", "target", "amount", "type"]


class FlowTracker:
    def __init__(self):
        self.records = []

    def record(
        self,
        source: str,
        target: str,
        amount: float,
        year: int,
        age: int,
        flow_type: str,
    ):
        self.records.append(
            {
                "year": year,
                "age": age,
                "source": source,
                "target": target,
                "amount": amount,
                "type": flow_type,
            }
        )

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.records, columns=FLOW_COLUMNS)
