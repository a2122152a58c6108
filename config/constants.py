"""
Application constants for the OPME validation engine.

Centralized location for all domain vocabularies, weights and messages.
"""

# ==================== Application Info ====================

APP_NAME = "OPME Validadores"
APP_VERSION = "1.0.0"
APP_ORGANIZATION = "ICARUS"

# ==================== Jurisdictions ====================

# Brazilian federative units (UF)
UF_CODES = (
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA",
    "MT", "MS", "MG", "PA", "PB", "PR", "PE", "PI", "RJ", "RN",
    "RS", "RO", "RR", "SC", "SP", "SE", "TO",
)

# Default region for phone number parsing
PHONE_REGION = "BR"

# ==================== Closed Vocabularies ====================

# ANVISA risk classes (RDC 751/2022)
RISK_CLASSES = ("I", "II", "III", "IV")
HIGH_RISK_CLASSES = ("III", "IV")

# Biological sex for medical records: masculino, feminino, indeterminado
SEX_CODES = ("M", "F", "I")

BLOOD_TYPES = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")

# ==================== Check Digit Weights ====================

CPF_WEIGHTS_1 = (10, 9, 8, 7, 6, 5, 4, 3, 2)
CPF_WEIGHTS_2 = (11, 10, 9, 8, 7, 6, 5, 4, 3, 2)

CNS_WEIGHTS = tuple(range(15, 0, -1))

# CNS numbering series by first digit
CNS_DEFINITIVE_SERIES = ("1", "2")
CNS_PROVISIONAL_SERIES = ("7", "8", "9")

# ==================== Lengths ====================

CPF_LENGTH = 11
CNPJ_LENGTH = 14
EAN13_LENGTH = 13
CNS_LENGTH = 15
NCM_LENGTH = 8
CFOP_LENGTH = 4
NFE_KEY_LENGTH = 44
TUSS_LENGTH = 8
ANVISA_REGISTRATION_LENGTH = 13
CEP_LENGTH = 8

CRM_MIN_DIGITS = 4
CRM_MAX_DIGITS = 8
RQE_MIN_DIGITS = 4
RQE_MAX_DIGITS = 8
LOT_MIN_LENGTH = 3
LOT_MAX_LENGTH = 30
MAX_EMAIL_LENGTH = 255

# ==================== Presentation ====================

CURRENCY_SYMBOL = "R$"
THOUSANDS_SEPARATOR = "."
DECIMAL_SEPARATOR = ","
CRM_LABEL = "CRM"

ISO_DATE_FORMAT = "%Y-%m-%d"
BR_DATE_FORMAT = "%d/%m/%Y"

# ==================== Defaults ====================

DEFAULT_EXPIRY_ALERT_DAYS = 30
DEFAULT_FUZZY_HEADER_CUTOFF = 85

SPREADSHEET_EXTENSIONS = [".xlsx", ".xls", ".csv"]

# ==================== Error Messages ====================

ERROR_MESSAGES = {
    "empty": "{field} não pode estar vazio",
    "length": "{field} deve ter {expected} dígitos (recebido: {actual})",
    "length_range": "{field} deve ter entre {minimum} e {maximum} caracteres (recebido: {actual})",
    "charset": "{field} deve conter apenas {allowed}",
    "filler": "{field} inválido (todos os dígitos iguais)",
    "check_digit": "{field} inválido (dígito verificador incorreto)",
    "vocabulary": "{field} inválido (valores aceitos: {allowed})",
    "format": "{field} inválida (use AAAA-MM-DD ou DD/MM/AAAA)",
    "future_date": "{field} não pode ser no futuro",
    "past_date": "{field} não pode ser no passado",
    "not_positive": "{field} deve ser maior que zero",
    "not_integer": "{field} deve ser um número inteiro",
    "import_error": "Importação falhou: {error}",
    "missing_columns": "Colunas obrigatórias ausentes: {columns}",
}
