from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from navengine.domain.models import NAVSnapshot, Position
from navengine.utils.numbers import is_finite_number, round_half_up

_INITIAL_KEYS = ("initial_value", "initialValue", "value")
_CURRENT_KEYS = ("current_value", "currentValue", "current")


class PositionSchema(BaseModel):
    """
    Persisted / wire form of a position.

    Accepts both the snake_case layout written by this engine and the
    camelCase layout (`value`, `current`, `tokenAmount`, ...) served by the
    fund backend. Derived fields are ignored on input.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    initial_value: int = Field(gt=0, validation_alias=AliasChoices("initial_value", "initialValue", "value"))
    current_value: int = Field(validation_alias=AliasChoices("current_value", "currentValue", "current"))
    token_amount: int = Field(ge=1, validation_alias=AliasChoices("token_amount", "tokenAmount"))
    last_spike_day: int = Field(default=0, ge=0, validation_alias=AliasChoices("last_spike_day", "lastSpikeDay"))
    description: str = ""
    address: Optional[str] = None
    transaction_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transaction_id", "transactionId")
    )

    @model_validator(mode="before")
    @classmethod
    def _default_current(cls, data):
        # Missing current value defaults to the initial value
        if isinstance(data, dict) and not any(k in data for k in _CURRENT_KEYS):
            for key in _INITIAL_KEYS:
                if key in data:
                    return {**data, "current_value": data[key]}
        return data

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("initial_value", "current_value", "token_amount", mode="before")
    @classmethod
    def _round_amounts(cls, value):
        if isinstance(value, float) and is_finite_number(value):
            return round_half_up(value)
        return value

    @field_validator("current_value")
    @classmethod
    def _floor_current(cls, value: int) -> int:
        return max(1, value)

    @field_validator("last_spike_day", mode="before")
    @classmethod
    def _default_spike_day(cls, value):
        return 0 if value is None else value

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value):
        return "" if value is None else value

    @classmethod
    def from_position(cls, position: Position) -> "PositionSchema":
        return cls(
            name=position.name,
            initial_value=position.initial_value,
            current_value=position.current_value,
            token_amount=position.token_amount,
            last_spike_day=position.last_spike_day,
            description=position.description,
            address=position.address,
            transaction_id=position.transaction_id,
        )

    def to_position(self) -> Position:
        return Position(
            name=self.name,
            initial_value=self.initial_value,
            current_value=self.current_value,
            token_amount=self.token_amount,
            last_spike_day=self.last_spike_day,
            description=self.description,
            address=self.address,
            transaction_id=self.transaction_id,
        )


class PositionView(BaseModel):
    name: str
    initial_value: int
    current_value: int
    change_percent: float
    token_amount: int
    price_per_token: int
    last_spike_day: int
    description: str
    address: Optional[str]
    transaction_id: Optional[str]

    @classmethod
    def from_position(cls, position: Position) -> "PositionView":
        return cls(
            name=position.name,
            initial_value=position.initial_value,
            current_value=position.current_value,
            change_percent=position.change_percent,
            token_amount=position.token_amount,
            price_per_token=position.price_per_token,
            last_spike_day=position.last_spike_day,
            description=position.description,
            address=position.address,
            transaction_id=position.transaction_id,
        )


class NAVSnapshotSchema(BaseModel):
    total_current_value: int
    total_initial_value: int
    change_percentage: float
    price_per_token: int
    token_supply: int
    day_number: int
    generated_at: datetime
    currency: str
    display_value: str
    formatted_native: str
    formatted_fiat: Optional[str]
    exchange_rate: Optional[float]
    price_per_token_usd: Optional[float]
    provenance: str
    positions: List[PositionView]

    @classmethod
    def from_snapshot(cls, snapshot: NAVSnapshot) -> "NAVSnapshotSchema":
        return cls(
            total_current_value=snapshot.total_current_value,
            total_initial_value=snapshot.total_initial_value,
            change_percentage=snapshot.change_percentage,
            price_per_token=snapshot.price_per_token,
            token_supply=snapshot.token_supply,
            day_number=snapshot.day_number,
            generated_at=snapshot.generated_at,
            currency=snapshot.currency.value,
            display_value=snapshot.display_value,
            formatted_native=snapshot.formatted_native,
            formatted_fiat=snapshot.formatted_fiat,
            exchange_rate=snapshot.exchange_rate,
            price_per_token_usd=snapshot.price_per_token_usd,
            provenance=snapshot.provenance.value,
            positions=[PositionView.from_position(p) for p in snapshot.positions],
        )
