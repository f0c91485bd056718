# app/core/bootstrap.py
"""
Bootstrap module for application initialization.
Reconciles the fixed plan catalog into the plans table on startup.
"""
import logging
from decimal import Decimal

from app.models.plan import Plan, UNLIMITED

logger = logging.getLogger("uvicorn.error")

FREE_PLAN_NAME = "free"

# Source of truth for the plans table. Order is cheapest first.
DEFAULT_PLANS: list[dict] = [
    {
        "name": FREE_PLAN_NAME,
        "display_name": "Grátis",
        "description": "Perfeito para começar",
        "price": Decimal("0"),
        "max_products": 10,
        "max_collections": 2,
        "features": ["Até 10 produtos", "Até 2 vitrines", "Compartilhamento por link", "Suporte por email"],
        "is_active": True,
    },
    {
        "name": "basic",
        "display_name": "Básico",
        "description": "Para pequenos negócios",
        "price": Decimal("29.90"),
        "max_products": 30,
        "max_collections": 3,
        "features": ["Até 30 produtos", "Até 3 vitrines", "Compartilhamento por link", "Suporte por email"],
        "is_active": True,
    },
    {
        "name": "plus",
        "display_name": "Plus",
        "description": "Para negócios em crescimento",
        "price": Decimal("59.90"),
        "max_products": 50,
        "max_collections": 5,
        "features": ["Até 50 produtos", "Até 5 vitrines", "Compartilhamento por link", "Suporte prioritário"],
        "is_active": True,
    },
    {
        "name": "pro",
        "display_name": "Profissional",
        "description": "Para negócios consolidados",
        "price": Decimal("89.90"),
        "max_products": 100,
        "max_collections": 10,
        "features": [
            "Até 100 produtos", "Até 10 vitrines", "Compartilhamento por link",
            "Suporte 24/7", "Domínio personalizado", "Analytics avançado",
        ],
        "is_active": True,
    },
    {
        "name": "enterprise",
        "display_name": "Empresarial",
        "description": "Para grandes operações",
        "price": Decimal("129.90"),
        "max_products": UNLIMITED,
        "max_collections": UNLIMITED,
        "features": [
            "Produtos ilimitados", "Vitrines ilimitadas", "Compartilhamento por link",
            "Suporte dedicado", "Domínio personalizado", "Analytics avançado",
            "API access", "White label",
        ],
        "is_active": True,
    },
]

async def ensure_default_plans(catalog: list[dict] | None = None) -> dict[str, int]:
    """
    Make the plans table match the catalog.

    - Plans missing from the table are inserted
    - Plans already present get every catalog field refreshed
    - Rows whose name is not in the catalog are deleted (their users fall
      back to the free tier through the SET_NULL foreign key)

    Returns counts of created / updated / removed rows.
    """
    catalog = DEFAULT_PLANS if catalog is None else catalog
    created = updated = 0

    for entry in catalog:
        fields = {k: v for k, v in entry.items() if k != "name"}
        existing = await Plan.get_or_none(name=entry["name"])
        if existing is None:
            await Plan.create(name=entry["name"], **fields)
            created += 1
            continue
        existing.update_from_dict(fields)
        await existing.save()
        updated += 1

    names = [entry["name"] for entry in catalog]
    # Counted by id: the delete's row count also includes SET NULL cascades on users
    stale_ids = await Plan.exclude(name__in=names).values_list("id", flat=True)
    if stale_ids:
        await Plan.filter(id__in=stale_ids).delete()
    removed = len(stale_ids)

    logger.info("[bootstrap] plan catalog reconciled: created=%d updated=%d removed=%d",
                created, updated, removed)
    return {"created": created, "updated": updated, "removed": removed}
