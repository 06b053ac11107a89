"""
CRM stage label → Conversions API event name.

Unknown stages pass through unchanged so new CRM stages still get delivered.
"""

FIRST_TOUCH_EVENT = "Lead"

CRM_STAGE_TO_EVENT: dict[str, str] = {
    "NOVOS": FIRST_TOUCH_EVENT,
    "ATENDEU": "Atendeu",
    "OPORTUNIDADE": "Oportunidade",
    "AVANÇADO": "Avançado",
    "VÍDEO": "Vídeo",
    "VENCEMOS": "Vencemos",
    "QUER EMPREGO": "Desqualificado",
    "QUER EMPRESTIMO": "Não Qualificado",
}


def map_crm_stage(stage_label: str) -> str:
    """Translate a CRM stage label (any case) to the platform event name."""
    return CRM_STAGE_TO_EVENT.get(stage_label.upper(), stage_label)
