"""Localized user-facing messages.

Field validation messages are keyed by pydantic error type; the values
are `str.format` templates receiving the error's `ctx` (min_length,
ge, ...). Unknown types fall back to the generic "invalid" message.
"""

MESSAGES: dict[str, dict[str, str]] = {
    "es": {
        # Field validation
        "missing": "Este campo es obligatorio",
        "string_too_short": "Debe tener al menos {min_length} caracteres",
        "string_too_long": "No puede superar {max_length} caracteres",
        "string_pattern_mismatch": "El formato no es válido",
        "too_short": "Debe incluir al menos {min_length} elemento(s)",
        "too_long": "No puede incluir más de {max_length} elementos",
        "greater_than": "Debe ser mayor a {gt}",
        "greater_than_equal": "Debe ser mayor o igual a {ge}",
        "less_than": "Debe ser menor a {lt}",
        "less_than_equal": "No puede superar {le}",
        "enum": "Selecciona una opción válida",
        "literal_error": "Selecciona una opción válida",
        "float_parsing": "Debe ser un número",
        "float_type": "Debe ser un número",
        "int_parsing": "Debe ser un número entero",
        "int_type": "Debe ser un número entero",
        "int_from_float": "Debe ser un número entero",
        "string_type": "Debe ser texto",
        "list_type": "Debe ser una lista",
        "dict_type": "Formato no válido",
        "model_type": "Formato no válido",
        "url_parsing": "URL no válida",
        "value_error": "Contiene contenido no permitido",
        "invalid": "Valor no válido",
        # Wizard / drafts
        "step_out_of_range": "El paso {step} no existe (1-{total})",
        "validation_failed": "Revisa los campos marcados antes de continuar",
        "draft_saved": "Borrador guardado exitosamente",
        "draft_not_found": "Borrador no encontrado",
        "draft_malformed": "El borrador no tiene un formato válido",
        "draft_type_mismatch": "Este borrador pertenece a otro asistente",
        "submission_failed": "No se pudo guardar la publicación. Inténtalo de nuevo.",
        "submission_ok": "Publicación creada exitosamente",
        "submission_updated": "Publicación actualizada exitosamente",
        "record_not_found": "La publicación no existe",
        "record_forbidden": "No puedes editar esta publicación",
        # Database
        "duplicate_record": "Ya existe un registro con este valor",
        "foreign_key_violation": "El registro referenciado no existe",
        "null_value": "Falta un campo obligatorio",
        "integrity_error": "El registro no cumple las restricciones de la base de datos",
        "database_unavailable": "La base de datos no está disponible. Inténtalo de nuevo.",
    },
    "en": {
        "missing": "This field is required",
        "string_too_short": "Must be at least {min_length} characters",
        "string_too_long": "Must be at most {max_length} characters",
        "string_pattern_mismatch": "Invalid format",
        "too_short": "Must include at least {min_length} item(s)",
        "too_long": "Must include at most {max_length} items",
        "greater_than": "Must be greater than {gt}",
        "greater_than_equal": "Must be at least {ge}",
        "less_than": "Must be less than {lt}",
        "less_than_equal": "Must be at most {le}",
        "enum": "Select a valid option",
        "literal_error": "Select a valid option",
        "float_parsing": "Must be a number",
        "float_type": "Must be a number",
        "int_parsing": "Must be a whole number",
        "int_type": "Must be a whole number",
        "int_from_float": "Must be a whole number",
        "string_type": "Must be text",
        "list_type": "Must be a list",
        "dict_type": "Invalid format",
        "model_type": "Invalid format",
        "url_parsing": "Invalid URL",
        "value_error": "Contains content that is not allowed",
        "invalid": "Invalid value",
        "step_out_of_range": "Step {step} does not exist (1-{total})",
        "validation_failed": "Fix the highlighted fields before continuing",
        "draft_saved": "Draft saved",
        "draft_not_found": "Draft not found",
        "draft_malformed": "Draft is malformed",
        "draft_type_mismatch": "This draft belongs to a different wizard",
        "submission_failed": "Could not save the listing. Please try again.",
        "submission_ok": "Listing created",
        "submission_updated": "Listing updated",
        "record_not_found": "Listing not found",
        "record_forbidden": "You cannot edit this listing",
        "duplicate_record": "A record with this value already exists",
        "foreign_key_violation": "Referenced record does not exist",
        "null_value": "Required field is missing",
        "integrity_error": "Database constraint violation",
        "database_unavailable": "Database temporarily unavailable. Please try again.",
    },
}


def _format_param(value):
    # Bounds on float fields may arrive as 0.0 or 999999999.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def translate(key: str, language: str = "es", **params) -> str:
    table = MESSAGES.get(language) or MESSAGES["es"]
    template = table.get(key)
    if template is None:
        template = table["invalid"]
    try:
        return template.format(**{k: _format_param(v) for k, v in params.items()})
    except (KeyError, IndexError):
        return table["invalid"]
