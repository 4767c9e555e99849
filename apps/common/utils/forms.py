from django import forms


def form_errors_as_text(form: forms.Form, fallback: str | None = None, separator: str = "\n") -> str:
    """Gộp lỗi của form thành một chuỗi cho thông báo SweetAlert (HX-Trigger)."""
    messages: list[str] = []
    for name, errors in form.errors.items():
        field = form.fields.get(name)
        # Lỗi chung (__all__) không có nhãn
        prefix = f"{field.label or name}: " if field is not None else ""
        messages.extend(f"{prefix}{error}" for error in errors)

    text = separator.join(dict.fromkeys(messages))
    return text or fallback or "Dữ liệu không hợp lệ."
