"""
Initial database content written on first boot.
"""

from __future__ import annotations

import copy

from tracker.auth import hash_password

SEED_DOCUMENT = {
    "users": [
        {
            "id": "admin",
            "username": "admin",
            "password": "admin",
            "name": "Administrator",
            "role": "admin",
        },
        {
            "id": "usman",
            "username": "usman",
            "password": "password",
            "name": "Usman Ahmed",
            "role": "partner",
        },
        {
            "id": "mark",
            "username": "mark",
            "password": "password",
            "name": "Mark Jason Sanker",
            "role": "partner",
        },
    ],
    "categories": [
        {"id": "cat1", "name": "Samples", "description": "Product samples and prototypes"},
        {"id": "cat2", "name": "Shipping", "description": "Shipping and logistics expenses"},
        {"id": "cat3", "name": "Marketing", "description": "Marketing and advertising expenses"},
        {"id": "cat4", "name": "Office Supplies", "description": "Office supplies and equipment"},
        {"id": "cat5", "name": "Software", "description": "Software subscriptions and tools"},
        {"id": "cat6", "name": "Travel", "description": "Business travel expenses"},
        {"id": "cat7", "name": "Other", "description": "Other miscellaneous expenses"},
    ],
    "expenses": [
        {
            "id": "e001",
            "description": "Product Samples",
            "amount": 500,
            "categoryId": "cat1",
            "paidBy": "usman",
            "date": "2025-03-01",
            "notes": "Initial product samples for client presentations",
        },
        {
            "id": "e002",
            "description": "Express Shipping",
            "amount": 120.50,
            "categoryId": "cat2",
            "paidBy": "mark",
            "date": "2025-03-05",
            "notes": "Overnight delivery to important client",
        },
        {
            "id": "e003",
            "description": "Office Supplies",
            "amount": 75.25,
            "categoryId": "cat4",
            "paidBy": "usman",
            "date": "2025-03-10",
            "notes": "Paper, pens, and basic office needs",
        },
    ],
    "investments": [
        {
            "id": "i001",
            "partner": "usman",
            "amount": 5000,
            "date": "2025-02-15",
            "notes": "Initial investment",
        },
        {
            "id": "i002",
            "partner": "mark",
            "amount": 5000,
            "date": "2025-02-15",
            "notes": "Initial investment",
        },
    ],
    "subsidies": [
        {
            "id": "s001",
            "partner": "usman",
            "amount": 1000,
            "date": "2025-03-10",
            "description": "Marketing campaign subsidy",
            "notes": "Extra funding for urgent marketing needs",
        }
    ],
    "tasks": [
        {
            "id": "t001",
            "title": "Contact supplier",
            "description": "Reach out to XYZ supplier for pricing",
            "assignedTo": "mark",
            "status": "pending",
            "priority": "high",
            "dueDate": "2025-03-20",
            "createdAt": "2025-03-15",
            "completedAt": None,
        },
        {
            "id": "t002",
            "title": "Prepare sales presentation",
            "description": "Create slides for new client pitch",
            "assignedTo": "usman",
            "status": "completed",
            "priority": "medium",
            "dueDate": "2025-03-10",
            "createdAt": "2025-03-05",
            "completedAt": "2025-03-09",
        },
    ],
    "events": [
        {
            "id": "ev001",
            "name": "Industry Conference",
            "description": "Annual industry conference",
            "startDate": "2025-04-15",
            "endDate": "2025-04-18",
            "location": "Convention Center",
            "status": "upcoming",
            "notes": "Need to prepare marketing materials",
        }
    ],
}


def build_seed_document() -> dict:
    """Return a fresh copy of the seed with user passwords hashed."""
    document = copy.deepcopy(SEED_DOCUMENT)
    for user in document["users"]:
        user["password"] = hash_password(user["password"])
    return document
