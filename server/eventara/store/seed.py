# ─────────────────────────────────────────────────────────────────────────────
# Seed Data — reference cities/categories plus demo users and events
# ─────────────────────────────────────────────────────────────────────────────
# Raw dicts in the wire (camelCase) shape. InMemoryEventStore validates and
# deep-copies them per instance, so nothing here is ever mutated.
# ─────────────────────────────────────────────────────────────────────────────

from typing import Any

_IMG = "https://picsum.photos/seed/{}/800/450"

CITIES: list[dict[str, Any]] = [
    {
        "id": "erbil",
        "name": {"en": "Erbil", "ar": "أربيل", "ku": "هەولێر"},
        "image": _IMG.format("erbil"),
    },
    {
        "id": "sulaymaniyah",
        "name": {"en": "Sulaymaniyah", "ar": "السليمانية", "ku": "سلێمانی"},
        "image": _IMG.format("sulaymaniyah"),
    },
    {
        "id": "duhok",
        "name": {"en": "Duhok", "ar": "دهوك", "ku": "دهۆک"},
        "image": _IMG.format("duhok"),
    },
    {
        "id": "halabja",
        "name": {"en": "Halabja", "ar": "حلبجة", "ku": "هەڵەبجە"},
        "image": _IMG.format("halabja"),
    },
]

# "all" is a UI filter, never a valid category for an event.
CATEGORIES: list[dict[str, Any]] = [
    {
        "id": "all",
        "name": {"en": "All", "ar": "الكل", "ku": "هەموو"},
        "image": _IMG.format("all"),
    },
    {
        "id": "music",
        "name": {"en": "Music", "ar": "موسيقى", "ku": "مۆسیقا"},
        "image": _IMG.format("music"),
    },
    {
        "id": "art",
        "name": {"en": "Art & Culture", "ar": "فن وثقافة", "ku": "هونەر و کەلتور"},
        "image": _IMG.format("art"),
    },
    {
        "id": "food",
        "name": {"en": "Food & Drink", "ar": "طعام وشراب", "ku": "خواردن و خواردنەوە"},
        "image": _IMG.format("food"),
    },
    {
        "id": "sports",
        "name": {"en": "Sports", "ar": "رياضة", "ku": "وەرزش"},
        "image": _IMG.format("sports"),
    },
    {
        "id": "tech",
        "name": {"en": "Technology", "ar": "تكنولوجيا", "ku": "تەکنەلۆژیا"},
        "image": _IMG.format("tech"),
    },
]

USERS: list[dict[str, Any]] = [
    {
        "id": "user-1",
        "name": "Aram Karim",
        "avatarUrl": "https://i.pravatar.cc/150?u=aram@example.com",
        "phone": "+964 750 123 4567",
        "email": "aram@example.com",
        "password": "password123",
        "isVerified": True,
    },
    {
        "id": "user-2",
        "name": "Lana Aziz",
        "avatarUrl": "https://i.pravatar.cc/150?u=lana@example.com",
        "phone": "+964 770 987 6543",
        "email": "lana@example.com",
        "password": "password123",
        "isVerified": True,
    },
    {
        "id": "user-3",
        "name": "Dilan Omar",
        "avatarUrl": "https://i.pravatar.cc/150?u=dilan@example.com",
        "phone": "+964 751 555 0101",
        "email": "dilan@example.com",
        "password": "password123",
        "isVerified": False,
    },
]

EVENTS: list[dict[str, Any]] = [
    {
        "id": "event-1",
        "title": {
            "en": "Citadel Sunset Concert",
            "ar": "حفلة غروب الشمس في القلعة",
            "ku": "کۆنسێرتی خۆرئاوابوون لە قەڵا",
        },
        "description": {
            "en": "An open-air evening of traditional and modern Kurdish music beneath the Erbil Citadel.",
            "ar": "أمسية موسيقية في الهواء الطلق تجمع الموسيقى الكردية التقليدية والحديثة تحت قلعة أربيل.",
            "ku": "ئێوارەیەکی مۆسیقای کوردی کلاسیک و نوێ لە ژێر قەڵای هەولێر.",
        },
        "organizerId": "user-1",
        "organizerName": "Aram Karim",
        "categoryId": "music",
        "cityId": "erbil",
        "date": "2026-11-14T18:30:00Z",
        "venue": "Erbil Citadel Square",
        "coordinates": {"lat": 36.1912, "lon": 44.0092},
        "organizerPhone": "+964 750 123 4567",
        "whatsappNumber": "+964 750 123 4567",
        "imageUrl": _IMG.format("citadel-concert"),
        "ticketInfo": "Free entry",
        "reviews": [],
        "isFeatured": True,
        "isTop": True,
    },
    {
        "id": "event-2",
        "title": {
            "en": "Sulaymaniyah Street Food Festival",
            "ar": "مهرجان طعام الشارع في السليمانية",
            "ku": "فێستیڤاڵی خواردنی شەقام لە سلێمانی",
        },
        "description": {
            "en": "Three days of local dishes, live cooking and family activities in Azadi Park.",
            "ar": "ثلاثة أيام من الأطباق المحلية والطبخ المباشر والأنشطة العائلية في حديقة آزادي.",
            "ku": "سێ ڕۆژ خواردنی ناوچەیی و چێشتلێنانی ڕاستەوخۆ و چالاکی خێزانی لە پارکی ئازادی.",
        },
        "organizerId": "user-2",
        "organizerName": "Lana Aziz",
        "categoryId": "food",
        "cityId": "sulaymaniyah",
        "date": "2026-10-30T12:00:00Z",
        "venue": "Azadi Park",
        "coordinates": {"lat": 35.5610, "lon": 45.4329},
        "organizerPhone": "+964 770 987 6543",
        "imageUrl": _IMG.format("street-food"),
        "ticketInfo": "5,000 IQD",
        "reviews": [
            {
                "id": "review-1",
                "user": {
                    "id": "user-1",
                    "name": "Aram Karim",
                    "avatarUrl": "https://i.pravatar.cc/150?u=aram@example.com",
                    "phone": "+964 750 123 4567",
                    "email": "aram@example.com",
                    "isVerified": True,
                },
                "rating": 5,
                "comment": "Great food and atmosphere.",
                "timestamp": "2025-10-31T20:00:00Z",
            }
        ],
        "isFeatured": True,
    },
    {
        "id": "event-3",
        "title": {
            "en": "Duhok Tech Meetup",
            "ar": "لقاء التكنولوجيا في دهوك",
            "ku": "کۆبوونەوەی تەکنەلۆژیا لە دهۆک",
        },
        "description": {
            "en": "Lightning talks from local startups followed by networking.",
            "ar": "محادثات قصيرة من الشركات الناشئة المحلية يليها تواصل مهني.",
            "ku": "وتاری کورت لە کۆمپانیا نوێیە ناوخۆییەکان و دواتر ناسینی یەکتر.",
        },
        "organizerId": "user-2",
        "organizerName": "Lana Aziz",
        "categoryId": "tech",
        "cityId": "duhok",
        "date": "2026-09-20T16:00:00Z",
        "venue": "University of Duhok, Hall B",
        "organizerPhone": "+964 770 987 6543",
        "imageUrl": _IMG.format("tech-meetup"),
        "reviews": [],
        "isTop": True,
    },
]
