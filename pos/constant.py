"""Editable static menu used to seed an empty catalog."""

from __future__ import annotations

CATEGORY_SEED: dict[str, str] = {
    "makanan": "Makanan",
    "minuman": "Minuman",
    "snack": "Snack",
}

# Prices are in Rupiah.
MENU_SEED: list[dict[str, object]] = [
    {
        "id": "nasi_goreng",
        "name": "Nasi Goreng",
        "price": 25000,
        "description": "Fried rice with egg and crackers",
        "category": "makanan",
    },
    {
        "id": "mie_goreng",
        "name": "Mie Goreng",
        "price": 23000,
        "description": "Fried noodles with vegetables",
        "category": "makanan",
    },
    {
        "id": "ayam_bakar",
        "name": "Ayam Bakar",
        "price": 32000,
        "description": "Grilled chicken with sambal",
        "category": "makanan",
    },
    {
        "id": "sate_ayam",
        "name": "Sate Ayam",
        "price": 28000,
        "description": "Chicken satay, peanut sauce",
        "category": "makanan",
    },
    {
        "id": "gado_gado",
        "name": "Gado-Gado",
        "price": 20000,
        "description": None,
        "category": "makanan",
    },
    {
        "id": "soto_ayam",
        "name": "Soto Ayam",
        "price": 22000,
        "description": "Chicken turmeric soup",
        "category": "makanan",
    },
    {
        "id": "es_teh",
        "name": "Es Teh Manis",
        "price": 5000,
        "description": None,
        "category": "minuman",
    },
    {
        "id": "es_jeruk",
        "name": "Es Jeruk",
        "price": 8000,
        "description": None,
        "category": "minuman",
    },
    {
        "id": "kopi_tubruk",
        "name": "Kopi Tubruk",
        "price": 10000,
        "description": None,
        "category": "minuman",
    },
    {
        "id": "pisang_goreng",
        "name": "Pisang Goreng",
        "price": 12000,
        "description": "Fried banana",
        "category": "snack",
    },
    {
        "id": "kerupuk",
        "name": "Kerupuk",
        "price": 3000,
        "description": None,
        "category": "snack",
    },
]
