"""Spending categories the AI may assign to a memo."""

from __future__ import annotations

from typing import Any

FALLBACK_CATEGORY = "Other"

AVAILABLE_CATEGORIES: list[dict[str, str]] = [
    {
        "name": "Payments & Purchases",
        "description": "Shopping, bills, invoices, retail purchases",
        "icon": "💳",
        "color": "bg-blue-100 border-blue-300 text-blue-800",
    },
    {
        "name": "Gifts & Tips",
        "description": "Gifts, donations, tips, rewards, presents",
        "icon": "🎁",
        "color": "bg-pink-100 border-pink-300 text-pink-800",
    },
    {
        "name": "Business & Work",
        "description": "Salary, work-related, business, contracts, services",
        "icon": "💼",
        "color": "bg-indigo-100 border-indigo-300 text-indigo-800",
    },
    {
        "name": "Family & Friends",
        "description": "Personal relationships, family, friends, loans",
        "icon": "👨‍👩‍👧‍👦",
        "color": "bg-yellow-100 border-yellow-300 text-yellow-800",
    },
    {
        "name": "Food & Dining",
        "description": "Restaurants, food delivery, meals, dining",
        "icon": "🍽️",
        "color": "bg-orange-100 border-orange-300 text-orange-800",
    },
    {
        "name": "Transportation",
        "description": "Travel, transport, gas, parking, rideshare",
        "icon": "🚗",
        "color": "bg-green-100 border-green-300 text-green-800",
    },
    {
        "name": "Entertainment",
        "description": "Movies, games, sports, hobbies, subscriptions",
        "icon": "🎮",
        "color": "bg-purple-100 border-purple-300 text-purple-800",
    },
    {
        "name": "Testing & Development",
        "description": "Testing, development, demo transactions",
        "icon": "🧪",
        "color": "bg-gray-100 border-gray-300 text-gray-800",
    },
    {
        "name": FALLBACK_CATEGORY,
        "description": "Uncategorized or unclear transactions",
        "icon": "💬",
        "color": "bg-gray-100 border-gray-300 text-gray-800",
    },
]

_BY_NAME = {cat["name"]: cat for cat in AVAILABLE_CATEGORIES}



def lookup_category(name: Any) -> dict[str, str]:
    """Return the catalog entry for ``name``, or the fallback entry."""
    return _BY_NAME.get(str(name), _BY_NAME[FALLBACK_CATEGORY])
