"""
Schemas for POST /import-leads.

Rows follow the column names of the lead-form export spreadsheet
(Portuguese headers for the personal fields).
"""

from pydantic import BaseModel, ConfigDict, field_validator


class LeadImportRow(BaseModel):
    """One exported lead. Numbers are accepted wherever text is expected."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str | None = None
    created_time: str | None = None
    email: str | None = None
    phone_number: str | None = None
    nome: str | None = None
    sobrenome: str | None = None
    data_de_nascimento: str | None = None
    city: str | None = None
    state: str | None = None
    cep: str | None = None
    ad_id: str | None = None
    ad_name: str | None = None
    adset_id: str | None = None
    adset_name: str | None = None
    campaign_id: str | None = None
    campaign_name: str | None = None
    form_id: str | None = None
    form_name: str | None = None
    platform: str | None = None
    is_organic: bool | None = None
    lead_status: str | None = None

    @field_validator("is_organic", mode="before")
    @classmethod
    def _blank_is_unknown(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ImportSummary(BaseModel):
    imported: int
    skipped: int
