"""Built-in catalog shapes, one per content tab."""

from content_catalog.models.schema import PartitionSchema, SelectorAxis, SelectorValue

JLPT_LEVELS = SelectorAxis(
    name="level",
    label="Cấp độ",
    values=tuple(SelectorValue(v, v) for v in ("N5", "N4", "N3", "N2", "N1")),
)

# Kanji adds a pseudo-level for radicals (bộ thủ).
KANJI_LEVELS = SelectorAxis(
    name="level",
    label="Cấp độ",
    values=(*JLPT_LEVELS.values, SelectorValue("BT", "Bộ thủ")),
)

QUESTION_CATEGORIES = SelectorAxis(
    name="category",
    label="Phần thi",
    values=(
        SelectorValue("vocabulary", "Từ vựng"),
        SelectorValue("grammar", "Ngữ pháp"),
        SelectorValue("reading", "Đọc hiểu"),
        SelectorValue("listening", "Nghe"),
    ),
)

CONVERSATION_TOPICS = SelectorAxis(
    name="topic",
    label="Chủ đề",
    values=(
        SelectorValue("free", "Tự do"),
        SelectorValue("greetings", "Chào hỏi"),
        SelectorValue("self_intro", "Giới thiệu bản thân"),
        SelectorValue("shopping", "Mua sắm"),
        SelectorValue("restaurant", "Nhà hàng"),
        SelectorValue("travel", "Du lịch"),
        SelectorValue("work", "Công việc"),
        SelectorValue("hobbies", "Sở thích"),
        SelectorValue("weather", "Thời tiết"),
        SelectorValue("directions", "Hỏi đường"),
    ),
)

LISTENING_LESSON_TYPES = SelectorAxis(
    name="lesson_type",
    label="Loại bài",
    values=(
        SelectorValue("vocabulary", "Từ Vựng"),
        SelectorValue("grammar", "Ngữ Pháp"),
        SelectorValue("conversation", "Hội Thoại"),
        SelectorValue("general", "Tổng Hợp"),
    ),
)

CATALOGS: dict[str, PartitionSchema] = {
    schema.name: schema
    for schema in (
        PartitionSchema("vocabulary", JLPT_LEVELS, max_depth=2, item_key_field="vocabulary"),
        PartitionSchema("grammar", JLPT_LEVELS, max_depth=2, item_key_field="title"),
        PartitionSchema("kanji", KANJI_LEVELS, max_depth=2, item_key_field="character"),
        PartitionSchema(
            "jlpt", JLPT_LEVELS, (QUESTION_CATEGORIES,), max_depth=1, item_key_field="question"
        ),
        PartitionSchema(
            "kaiwa", JLPT_LEVELS, (CONVERSATION_TOPICS,), max_depth=1, item_key_field="question"
        ),
        PartitionSchema("lectures", JLPT_LEVELS, max_depth=1, item_key_field="title"),
        PartitionSchema("reading", JLPT_LEVELS, max_depth=1, item_key_field="title"),
        PartitionSchema(
            "listening", JLPT_LEVELS, (LISTENING_LESSON_TYPES,), max_depth=1, item_key_field="title"
        ),
    )
}


def get_schema(name: str) -> PartitionSchema:
    """Return the built-in schema called ``name``."""
    try:
        return CATALOGS[name]
    except KeyError:
        msg = f"Unknown catalog {name!r} (known: {', '.join(sorted(CATALOGS))})"
        raise KeyError(msg) from None
