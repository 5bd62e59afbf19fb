"""Life events as tagged variants."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Iterable

from exit_readiness.exceptions import ValidationError
from exit_readiness.mortgage import PurchaseDetails, RateStep


class EventType(str, Enum):
    """Closed set of life event tags."""

    INCOME_INCREASE = "income_increase"
    INCOME_DECREASE = "income_decrease"
    EXPENSE_INCREASE = "expense_increase"
    EXPENSE_DECREASE = "expense_decrease"
    ASSET_PURCHASE = "asset_purchase"
    ASSET_GAIN = "asset_gain"
    HOUSING_PURCHASE = "housing_purchase"
    CHILD_BIRTH = "child_birth"
    EDUCATION = "education"
    RETIREMENT_PARTIAL = "retirement_partial"
    RENTAL_INCOME = "rental_income"


class Target(str, Enum):
    """Household member an income event applies to."""

    SELF = "self"
    PARTNER = "partner"


@dataclass(frozen=True)
class LifeEvent:
    """
    Base class for a discrete future event.

    Attributes:
        age: Primary earner's age when the event starts
        amount: Annual amount (or lump sum for one-time events)
        id: Caller-assigned identifier
        name: Display label
        duration: Years the event lasts; None means open-ended
        is_recurring: Recurring events with duration <= 0 last a single year
    """

    age: int
    amount: float
    id: str = ""
    name: str = ""
    duration: int | None = None
    is_recurring: bool = False

    event_type: ClassVar[EventType]
    one_time: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if isinstance(self.age, bool) or not isinstance(self.age, int) or self.age < 0:
            raise ValidationError("age", "Must be a non-negative integer")
        if not math.isfinite(self.amount):
            raise ValidationError("amount", "Must be a finite number")
        if self.duration is not None and not isinstance(self.duration, int):
            raise ValidationError("duration", "Must be an integer number of years")

    @property
    def end_age(self) -> int | None:
        """First age at which the event no longer applies (None = never ends)."""
        if self.one_time:
            return self.age + 1
        if self.duration is None:
            return None
        if self.duration <= 0:
            return self.age + 1 if self.is_recurring else None
        return self.age + self.duration

    def is_active(self, age: int) -> bool:
        """Whether the event applies in the year the household is `age`."""
        if age < self.age:
            return False
        end = self.end_age
        return end is None or age < end

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form, tagged with the event type."""
        data = asdict(self)
        data["type"] = self.event_type.value
        return data


@dataclass(frozen=True)
class IncomeEvent(LifeEvent):
    """Change to one earner's gross income while active."""

    target: Target = Target.SELF
    sign: ClassVar[int] = 1

    @property
    def signed_amount(self) -> float:
        return self.sign * self.amount


@dataclass(frozen=True)
class IncomeIncrease(IncomeEvent):
    event_type: ClassVar[EventType] = EventType.INCOME_INCREASE


@dataclass(frozen=True)
class IncomeDecrease(IncomeEvent):
    event_type: ClassVar[EventType] = EventType.INCOME_DECREASE
    sign: ClassVar[int] = -1


@dataclass(frozen=True)
class ExpenseEvent(LifeEvent):
    """Change to annual spending, stated in today's money."""

    sign: ClassVar[int] = 1

    @property
    def signed_amount(self) -> float:
        return self.sign * self.amount


@dataclass(frozen=True)
class ExpenseIncrease(ExpenseEvent):
    event_type: ClassVar[EventType] = EventType.EXPENSE_INCREASE


@dataclass(frozen=True)
class ExpenseDecrease(ExpenseEvent):
    event_type: ClassVar[EventType] = EventType.EXPENSE_DECREASE
    sign: ClassVar[int] = -1


@dataclass(frozen=True)
class LumpSumEvent(LifeEvent):
    """One-time transfer applied directly to the asset balance."""

    one_time: ClassVar[bool] = True

    @property
    def lump_sum(self) -> float:
        return self.amount


@dataclass(frozen=True)
class AssetGain(LumpSumEvent):
    """Inheritance, severance, gifts and similar inflows."""

    event_type: ClassVar[EventType] = EventType.ASSET_GAIN


@dataclass(frozen=True)
class AssetPurchase(LumpSumEvent):
    """Large one-off outflow. A negative amount is a net receipt."""

    event_type: ClassVar[EventType] = EventType.ASSET_PURCHASE

    @property
    def lump_sum(self) -> float:
        return -self.amount


@dataclass(frozen=True)
class HousingPurchase(LumpSumEvent):
    """
    Home purchase: the upfront outflow hits assets at `age` and housing
    costs switch to the property's schedule from then on. `amount` is
    informational; the outflow comes from the purchase details.
    """

    purchase: PurchaseDetails = field(kw_only=True)

    event_type: ClassVar[EventType] = EventType.HOUSING_PURCHASE

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.purchase, PurchaseDetails):
            raise ValidationError("purchase", "Housing purchase requires purchase details")

    @property
    def lump_sum(self) -> float:
        return -self.purchase.upfront_outflow


@dataclass(frozen=True)
class PartialRetirement(LifeEvent):
    """Part-time or advisory income earned after the target has retired."""

    target: Target = Target.SELF

    event_type: ClassVar[EventType] = EventType.RETIREMENT_PARTIAL


@dataclass(frozen=True)
class RentalIncome(LifeEvent):
    """Net rental income, received before and after retirement."""

    event_type: ClassVar[EventType] = EventType.RENTAL_INCOME


@dataclass(frozen=True)
class ChildBirth(LifeEvent):
    """Child-related spending; normalized to an expense increase."""

    event_type: ClassVar[EventType] = EventType.CHILD_BIRTH


@dataclass(frozen=True)
class Education(LifeEvent):
    """Education spending; normalized to an expense increase."""

    event_type: ClassVar[EventType] = EventType.EDUCATION


EVENT_CLASSES: dict[EventType, type[LifeEvent]] = {
    cls.event_type: cls
    for cls in (
        IncomeIncrease,
        IncomeDecrease,
        ExpenseIncrease,
        ExpenseDecrease,
        AssetPurchase,
        AssetGain,
        HousingPurchase,
        ChildBirth,
        Education,
        PartialRetirement,
        RentalIncome,
    )
}


def normalize_event(event: LifeEvent) -> LifeEvent:
    """Map presentation-only event kinds onto the engine's vocabulary."""
    if isinstance(event, (ChildBirth, Education)):
        return ExpenseIncrease(
            age=event.age,
            amount=event.amount,
            id=event.id,
            name=event.name,
            duration=event.duration,
            is_recurring=event.is_recurring,
        )
    return event


def normalize_events(events: Iterable[LifeEvent]) -> tuple[LifeEvent, ...]:
    """Normalize every event, preserving order."""
    return tuple(normalize_event(event) for event in events)


def purchase_details_from_dict(data: dict[str, Any]) -> PurchaseDetails:
    """Create PurchaseDetails from plain data."""
    steps = tuple(
        step if isinstance(step, RateStep) else RateStep(year=int(step["year"]), rate=float(step["rate"]))
        for step in data.get("rate_steps", ())
    )
    known = {f.name for f in fields(PurchaseDetails)} - {"rate_steps"}
    kwargs = {key: value for key, value in data.items() if key in known}
    return PurchaseDetails(rate_steps=steps, **kwargs)


def event_from_dict(data: dict[str, Any]) -> LifeEvent:
    """
    Create the right event variant from a tagged dictionary.

    Raises:
        ValidationError: if the tag is unknown or the fields are invalid
    """
    try:
        event_type = EventType(data["type"])
    except (KeyError, ValueError) as e:
        raise ValidationError("type", f"Unknown life event type: {data.get('type')!r}") from e

    cls = EVENT_CLASSES[event_type]
    kwargs: dict[str, Any] = {
        "age": data.get("age"),
        "amount": float(data.get("amount", 0.0)),
        "id": data.get("id", ""),
        "name": data.get("name", ""),
        "duration": data.get("duration"),
        "is_recurring": bool(data.get("is_recurring", False)),
    }

    if issubclass(cls, (IncomeEvent, PartialRetirement)):
        try:
            kwargs["target"] = Target(data.get("target") or Target.SELF)
        except ValueError as e:
            raise ValidationError("target", f"Unknown target: {data.get('target')!r}") from e

    if cls is HousingPurchase:
        details = data.get("purchase")
        if details is None:
            raise ValidationError("purchase", "Housing purchase requires purchase details")
        kwargs["purchase"] = (
            details if isinstance(details, PurchaseDetails) else purchase_details_from_dict(details)
        )

    return cls(**kwargs)
