"""Rate calculator: turns a project's billing configuration into amounts.

A project bills either by the hour or as a fixed contract value. The two are
modelled as separate rate types so that a project without a usable rate can
never silently produce a zero amount.
"""

from dataclasses import dataclass
from decimal import Decimal

from backend.app.core.exceptions import ValidationError
from backend.app.models.project import Project
from backend.app.services.money import ZERO, quantize_money, to_decimal


@dataclass(frozen=True)
class HourlyRate:
    rate: Decimal

    def amount_for(self, hours_worked) -> Decimal:
        return quantize_money(to_decimal(hours_worked) * self.rate)


@dataclass(frozen=True)
class FixedRate:
    amount: Decimal

    def amount_for(self, hours_worked=None) -> Decimal:
        return quantize_money(self.amount)


RateModel = HourlyRate | FixedRate


@dataclass(frozen=True)
class LineAmount:
    hours_billed: Decimal
    rate: Decimal
    amount: Decimal


def rate_model_for_project(project: Project) -> RateModel:
    """Resolve the active rate model; raise when the project cannot be billed."""
    if project.rate_type == "hourly":
        if project.hourly_rate is None or to_decimal(project.hourly_rate) <= ZERO:
            raise ValidationError(f"Project {project.id} bills hourly but has no positive hourly_rate")
        return HourlyRate(rate=quantize_money(project.hourly_rate))
    if project.rate_type == "fixed":
        if project.fixed_rate is None or to_decimal(project.fixed_rate) <= ZERO:
            raise ValidationError(f"Project {project.id} bills a fixed rate but has no positive fixed_rate")
        return FixedRate(amount=quantize_money(project.fixed_rate))
    raise ValidationError(f"Project {project.id} has unknown rate_type {project.rate_type!r}")


def compute_amount(project: Project, hours_worked) -> Decimal:
    """Amount for a single task: hours x hourly rate, or the whole fixed value."""
    return rate_model_for_project(project).amount_for(hours_worked)


def split_fixed_amount(total: Decimal, parts: int) -> list[Decimal]:
    """Split evenly into ``parts`` cent amounts; the last share absorbs rounding."""
    if parts <= 0:
        return []
    share = quantize_money(to_decimal(total) / parts)
    shares = [share] * (parts - 1)
    shares.append(quantize_money(to_decimal(total) - share * (parts - 1)))
    return shares


def compute_line_amounts(project: Project, hours: list) -> list[LineAmount]:
    """Amounts for every task billed together on one invoice, in order."""
    model = rate_model_for_project(project)
    if isinstance(model, HourlyRate):
        return [
            LineAmount(hours_billed=quantize_money(h), rate=model.rate, amount=model.amount_for(h))
            for h in hours
        ]
    shares = split_fixed_amount(model.amount, len(hours))
    return [
        LineAmount(hours_billed=quantize_money(h), rate=share, amount=share)
        for h, share in zip(hours, shares)
    ]


def convert_for_display(amount, exchange_rate, conversion_factor=None) -> Decimal:
    """Presentational conversion; callers must never persist the result."""
    factor = to_decimal(conversion_factor) if conversion_factor is not None else Decimal("1")
    return quantize_money(to_decimal(amount) * to_decimal(exchange_rate) * factor)
