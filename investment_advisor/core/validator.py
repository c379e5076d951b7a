# Role: Input gatekeeper for submit. Checks the form has every required field filled in
# and reports which ones are missing (form order), so the controller can warn instead of calling the provider.

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from investment_advisor.models.form_state import FIELD_LABELS, REQUIRED_FIELDS, FormState


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    missing_fields: List[str]

    @property
    def missing_labels(self) -> List[str]:
        return [FIELD_LABELS[name] for name in self.missing_fields]


class FormValidator:
    def validate(self, form: FormState) -> ValidationResult:
        # Key line: whitespace-only input counts as empty.
        missing = [name for name in REQUIRED_FIELDS if not str(getattr(form, name)).strip()]
        return ValidationResult(ok=not missing, missing_fields=missing)
