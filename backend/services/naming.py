# backend/services/naming.py
"""Display names for products, built from their resolved catalog relations."""

FALLBACK_PRODUCT_NAME = "Unnamed product"


def _capacity(option) -> str:
    return f"{option.capacity}GB"


def compose_product_name(product) -> str:
    """
    Brand, model, storage, memory, color and description joined by spaces.

    A direct storage / color option wins over the legacy text kept on the
    model; the two are never combined. Absent parts are skipped, and a
    product with no parts at all gets FALLBACK_PRODUCT_NAME.
    """
    brand = getattr(product, "brand", None)
    model = getattr(product, "model", None)
    storage = getattr(product, "storage", None)
    ram = getattr(product, "ram", None)
    color = getattr(product, "color", None)

    parts = []
    if brand is not None:
        parts.append(brand.name)
    if model is not None:
        parts.append(model.name)

    if storage is not None and storage.capacity:
        parts.append(_capacity(storage))
    elif model is not None and model.storage:
        parts.append(model.storage)

    if ram is not None and ram.capacity:
        parts.append(_capacity(ram))

    if color is not None and color.name:
        parts.append(color.name)
    elif model is not None and model.color:
        parts.append(model.color)

    parts.append(getattr(product, "description", None))

    name = " ".join(p.strip() for p in parts if p and p.strip())
    return name or FALLBACK_PRODUCT_NAME
