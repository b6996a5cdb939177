"""
Client intake assessment.

The questionnaire a coach fills in with a new client. It is exported as a
PDF and kept locally as the "last assessment" so the builders can prefill
the client fields; it is never sent to the server.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any

from .builder import ClientDetails, PlanValidationError
from .documents import DocumentSection, PlanDocument, client_detail_parts, pdf_filename


@dataclass
class ClientAssessment:
    # Personal
    full_name: str = ""
    phone_number: str = ""
    gender: str = ""
    age: str = ""
    occupation: str = ""
    weight: str = ""
    height: str = ""
    # Health
    chronic_illnesses: str = ""
    surgeries: str = ""
    # Nutrition
    appetite: str = ""
    meals_per_day: str = ""
    allergies: str = ""
    supplements_current: str = ""
    supplements_budget: str = ""
    supplements_wanted: str = "No"
    hormones_used: str = "No"
    # Lifestyle
    smoke_or_drink: str = ""
    sleep_hours: str = ""
    wake_time: str = ""
    work_days: str = ""
    work_start: str = ""
    work_end: str = ""
    # Training
    last_trained: str = ""
    other_sports: str = ""
    training_time: str = ""

    SECTIONS = (
        ("Health", ("chronic_illnesses", "surgeries")),
        ("Nutrition", (
            "appetite", "meals_per_day", "allergies", "supplements_current",
            "supplements_budget", "supplements_wanted", "hormones_used",
        )),
        ("Lifestyle", (
            "occupation", "smoke_or_drink", "sleep_hours", "wake_time",
            "work_days", "work_start", "work_end",
        )),
        ("Training", ("last_trained", "other_sports", "training_time")),
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientAssessment":
        known = {f.name for f in fields(cls)}
        return cls(**{k: "" if v is None else str(v) for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def validate(self) -> None:
        if not self.full_name.strip():
            raise PlanValidationError("Please enter at least the Full Name.")

    def client_details(self) -> ClientDetails:
        return ClientDetails(
            name=self.full_name.strip(),
            gender=self.gender.strip(),
            age=self.age.strip(),
            height=self.height.strip(),
            weight=self.weight.strip(),
        )

    def render_document(self, coach_label: str = "") -> PlanDocument:
        sections = []
        for heading, names in self.SECTIONS:
            lines = [
                f"{name.replace('_', ' ').capitalize()}: {getattr(self, name).strip()}"
                for name in names
                if getattr(self, name).strip()
            ]
            if lines:
                sections.append(DocumentSection(heading=heading, lines=lines))

        details = client_detail_parts(self.gender, self.age, self.height, self.weight)
        if self.phone_number.strip():
            details.append(f"Phone: {self.phone_number.strip()}")

        return PlanDocument(
            title="Client Assessment",
            subtitle=f"Client: {self.full_name.strip() or '-'}",
            details=details,
            byline=f"Coach: {coach_label}" if coach_label else "",
            sections=sections,
            empty_message="No answers recorded.",
        )

    @property
    def pdf_filename(self) -> str:
        return pdf_filename(self.full_name, suffix="assessment", fallback="client")
