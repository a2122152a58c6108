"""
Record schemas composed from the field validators.

A schema is a list of FieldRule entries. validate_record runs every rule
and collects one FieldError per rejected field instead of stopping at the
first one, so a form can highlight all problems at once. Optional fields
are expressed by wrapping a mandatory validator with optional().
"""

import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from .canonical import require_text
from .checksums import validate_cpf, validate_cnpj, validate_cpf_or_cnpj, validate_ean13, validate_cns
from .exceptions import FailureReason, ValidationError
from .models import FieldError, RecordValidationResult, InvoiceItem
from .rules import (
    parse_date,
    validate_risk_class,
    validate_birth_date,
    validate_surgery_date,
    validate_expiry_date,
    validate_time,
    validate_sex,
    validate_blood_type,
    validate_amount_cents,
    validate_quantity,
)
from .validators import (
    validate_ncm,
    validate_cfop,
    validate_nfe_key,
    validate_uf,
    validate_crm,
    validate_rqe,
    validate_cid10,
    validate_tuss,
    validate_cbhpm,
    validate_lot,
    validate_anvisa_registration,
    validate_cep,
    validate_phone,
    validate_email,
    validate_invoice_number,
    validate_invoice_series,
)

Validator = Callable[..., Any]


def is_blank(raw: Any) -> bool:
    """True for None, NaN and whitespace-only strings."""
    if isinstance(raw, float) and math.isnan(raw):
        return True
    return raw is None or (isinstance(raw, str) and not raw.strip())


def optional(validator: Validator) -> Validator:
    """
    Make a validator accept blank input.

    Blank values (None, "") return None; anything else goes through the
    mandatory validator unchanged, so malformed non-empty input still fails.
    """

    def optional_validator(raw: Any, **kwargs) -> Any:
        if is_blank(raw):
            return None
        return validator(raw, **kwargs)

    optional_validator.__name__ = f"optional_{getattr(validator, '__name__', 'validator')}"
    optional_validator.__wrapped__ = validator
    return optional_validator


def bounded_text(label: str, min_length: int, max_length: int) -> Validator:
    """Build a validator for free text with length limits (names, descriptions)."""

    def validate_text(raw: Any) -> str:
        cleaned = require_text(raw, label)
        if not min_length <= len(cleaned) <= max_length:
            raise ValidationError(
                f"{label} deve ter entre {min_length} e {max_length} caracteres",
                reason=FailureReason.LENGTH,
                details={"length": len(cleaned)},
            )
        return cleaned

    validate_text.__name__ = f"validate_{label.lower().replace(' ', '_')}"
    return validate_text


def validate_calendar_date(raw: Any) -> date:
    """Parse a date without any temporal-direction rule."""
    return parse_date(raw)


@dataclass(frozen=True)
class FieldRule:
    """
    One field of a record schema.

    Attributes:
        name: Key in the input dict
        validator: Field validator (ignored when nested is set)
        many: Field holds a list; each element is validated
        takes_today: Validator receives the reference date
        nested: Sub-schema for lists of nested records
    """

    name: str
    validator: Optional[Validator] = None
    many: bool = False
    takes_today: bool = False
    nested: Optional[tuple] = None


def _apply(rule: FieldRule, raw: Any, today: Optional[date]) -> Any:
    if rule.takes_today:
        return rule.validator(raw, today=today)
    return rule.validator(raw)


def validate_record(
    data: Dict[str, Any],
    rules: List[FieldRule],
    today: Optional[date] = None,
    prefix: str = "",
) -> RecordValidationResult:
    """
    Validate a record against a schema.

    Args:
        data: Raw field values keyed by field name
        rules: Schema
        today: Reference date for date rules (defaults to the current date)
        prefix: Field-name prefix for nested records (e.g. "itens[0].")

    Returns:
        RecordValidationResult with canonical values and field errors
    """
    result = RecordValidationResult()

    for rule in rules:
        field_name = f"{prefix}{rule.name}"
        raw = data.get(rule.name)

        if rule.many or rule.nested:
            items = [] if raw is None else raw
            if not isinstance(items, (list, tuple)):
                result.errors.append(FieldError(
                    field=field_name,
                    reason=FailureReason.PATTERN,
                    message=f"{rule.name} deve ser uma lista",
                    value=raw,
                ))
                continue

            accepted = []
            for index, item in enumerate(items):
                item_name = f"{field_name}[{index}]"
                if rule.nested:
                    if not isinstance(item, dict):
                        result.errors.append(FieldError(
                            field=item_name,
                            reason=FailureReason.PATTERN,
                            message=f"{item_name} deve ser um registro",
                            value=item,
                        ))
                        continue
                    nested = validate_record(item, rule.nested, today, prefix=f"{item_name}.")
                    result.errors.extend(nested.errors)
                    accepted.append(nested.values)
                    continue
                try:
                    accepted.append(_apply(rule, item, today))
                except ValidationError as e:
                    result.errors.append(FieldError.from_exception(item_name, e, item))

            result.values[rule.name] = accepted
            continue

        try:
            result.values[rule.name] = _apply(rule, raw, today)
        except ValidationError as e:
            result.errors.append(FieldError.from_exception(field_name, e, raw))

    return result


def merge_invoice_items(items: List[InvoiceItem]) -> List[InvoiceItem]:
    """
    Merge invoice lines describing the same batch.

    Lines sharing product code, lot, expiry and unit price are summed by
    quantity. The same batch billed at different prices stays on separate
    lines so no line total changes.
    The first occurrence keeps its position and other attributes.

    Args:
        items: Invoice items in document order

    Returns:
        New list of merged items (inputs are not modified)
    """
    merged: Dict[tuple, InvoiceItem] = {}
    for item in items:
        existing = merged.get(item.merge_key)
        if existing is None:
            merged[item.merge_key] = replace(item)
        else:
            existing.quantity += item.quantity
    return list(merged.values())


# ==================== Schemas ====================

PRODUCT_RULES = (
    FieldRule("registro_anvisa", validate_anvisa_registration),
    FieldRule("descricao", bounded_text("Descrição", 10, 500)),
    FieldRule("fabricante_cnpj", validate_cnpj),
    FieldRule("classe_risco", validate_risk_class),
    FieldRule("lote", optional(validate_lot)),
    FieldRule("validade", optional(validate_expiry_date), takes_today=True),
    FieldRule("preco_tabela_cents", validate_amount_cents),
    FieldRule("gtin_ean13", optional(validate_ean13)),
    FieldRule("ncm", optional(validate_ncm)),
)

INVOICE_ITEM_RULES = (
    FieldRule("codigo_produto", bounded_text("Código do produto", 1, 60)),
    FieldRule("descricao", bounded_text("Descrição", 3, 500)),
    FieldRule("ncm", optional(validate_ncm)),
    FieldRule("gtin", optional(validate_ean13)),
    FieldRule("lote", validate_lot),
    FieldRule("validade", validate_calendar_date),
    FieldRule("registro_anvisa", validate_anvisa_registration),
    FieldRule("quantidade", validate_quantity),
    FieldRule("valor_unitario_cents", validate_amount_cents),
)

INVOICE_RULES = (
    FieldRule("emitente_cnpj", validate_cnpj),
    FieldRule("destinatario_cnpj_cpf", validate_cpf_or_cnpj),
    FieldRule("numero_nfe", validate_invoice_number),
    FieldRule("serie", validate_invoice_series),
    FieldRule("chave_acesso", optional(validate_nfe_key)),
    FieldRule("cfop", optional(validate_cfop)),
    FieldRule("data_emissao", validate_calendar_date),
    FieldRule("valor_total_cents", validate_amount_cents),
    FieldRule("itens", nested=INVOICE_ITEM_RULES),
)

PHYSICIAN_RULES = (
    FieldRule("nome_completo", bounded_text("Nome", 5, 200)),
    FieldRule("crm", validate_crm),
    FieldRule("crm_estado", validate_uf),
    FieldRule("rqe", optional(validate_rqe)),
    FieldRule("especialidade", bounded_text("Especialidade", 3, 100)),
    FieldRule("telefone", optional(validate_phone)),
    FieldRule("celular", optional(validate_phone)),
    FieldRule("email", optional(validate_email)),
)

PATIENT_RULES = (
    FieldRule("nome_completo", bounded_text("Nome", 5, 200)),
    FieldRule("cpf", validate_cpf),
    FieldRule("cns", optional(validate_cns)),
    FieldRule("data_nascimento", validate_birth_date, takes_today=True),
    FieldRule("sexo", validate_sex),
    FieldRule("tipo_sanguineo", optional(validate_blood_type)),
    FieldRule("telefone", optional(validate_phone)),
    FieldRule("email", optional(validate_email)),
    FieldRule("estado", optional(validate_uf)),
    FieldRule("cep", optional(validate_cep)),
)

SURGERY_MATERIAL_RULES = (
    FieldRule("registro_anvisa", validate_anvisa_registration),
    FieldRule("descricao", bounded_text("Descrição", 5, 500)),
    FieldRule("quantidade", validate_quantity),
    FieldRule("lote", optional(validate_lot)),
    FieldRule("validade", optional(validate_calendar_date)),
)

SURGERY_RULES = (
    FieldRule("medico_crm", validate_crm),
    FieldRule("cid10_principal", validate_cid10),
    FieldRule("cid10_secundarios", validate_cid10, many=True),
    FieldRule("codigo_tuss", optional(validate_tuss)),
    FieldRule("codigo_cbhpm", optional(validate_cbhpm)),
    FieldRule("data_cirurgia", validate_surgery_date, takes_today=True),
    FieldRule("hora_inicio", optional(validate_time)),
    FieldRule("hora_fim", optional(validate_time)),
    FieldRule("materiais_opme", nested=SURGERY_MATERIAL_RULES),
    FieldRule("valor_total_cents", optional(validate_amount_cents)),
)

SCHEMAS = {
    "product": PRODUCT_RULES,
    "invoice": INVOICE_RULES,
    "invoice_item": INVOICE_ITEM_RULES,
    "physician": PHYSICIAN_RULES,
    "patient": PATIENT_RULES,
    "surgery": SURGERY_RULES,
}
