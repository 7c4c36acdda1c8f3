from pydantic import BaseModel, ConfigDict


class SupplyReport(BaseModel):
    # Human scale supplies of one aggregation cycle
    model_config = ConfigDict(frozen=True)

    total: float
    circulating: float
    max: float
