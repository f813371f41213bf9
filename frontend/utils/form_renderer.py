from datetime import date

import streamlit as st

from clinic_api.forms import FieldSpec, FormSchema, validate_form


def _widget(spec: FieldSpec, key: str, default):
    label = f"{spec.label} *" if spec.required else spec.label
    if spec.type == "number":
        return st.text_input(label, value="" if default is None else str(default), key=key, help=spec.help)
    if spec.type == "date":
        return st.date_input(label, value=default or (date.today() if spec.required else None), key=key, help=spec.help)
    if spec.type == "select":
        options = [""] + list(spec.choices) if not spec.required else list(spec.choices)
        index = options.index(default) if default in options else 0
        return st.selectbox(label, options, index=index, key=key, help=spec.help)
    if spec.type == "textarea":
        return st.text_area(label, value=default or "", key=key, help=spec.help)
    return st.text_input(label, value=default or "", key=key, help=spec.help)


def render_form(
    schema: FormSchema,
    key: str,
    defaults: dict | None = None,
    submit_label: str = "Save",
    columns: int = 2,
) -> dict | None:
    """Render every field of ``schema`` in one ``st.form``.

    Returns the cleaned values on a valid submit, otherwise ``None``; field
    errors are shown inline with ``st.error``.
    """
    defaults = defaults or {}
    raw = {}
    with st.form(key):
        cols = st.columns(columns)
        for index, spec in enumerate(schema.fields):
            with cols[index % columns]:
                raw[spec.name] = _widget(spec, f"{key}_{spec.name}", defaults.get(spec.name))
        submitted = st.form_submit_button(submit_label, type="primary", use_container_width=True)

    if not submitted:
        return None
    cleaned, errors = validate_form(schema, raw)
    for message in errors.values():
        st.error(message)
    if errors:
        return None
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in cleaned.items()}
