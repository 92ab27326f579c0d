"""Vocabulary tables for growthchat parameter extraction.

Descriptive words map onto numeric scales or canonical values. Phrase lookups
in entities.py check longer phrases first, so "not great" wins over "great".
"""

from __future__ import annotations

# Mood descriptors on a 1-10 scale
MOOD_WORDS: dict[str, int] = {
    # 10
    "ecstatic": 10,
    "euphoric": 10,
    "overjoyed": 10,
    "blissful": 10,
    # 9
    "on top of the world": 9,
    "elated": 9,
    "thrilled": 9,
    "great": 9,
    "incredible": 9,
    # 8
    "excited": 8,
    "amazing": 8,
    "fantastic": 8,
    "wonderful": 8,
    "excellent": 8,
    "joyful": 8,
    # 7
    "happy": 7,
    "good": 7,
    "positive": 7,
    "cheerful": 7,
    "upbeat": 7,
    "pleased": 7,
    "grateful": 7,
    # 6
    "content": 6,
    "satisfied": 6,
    "fine": 6,
    "alright": 6,
    "decent": 6,
    "calm": 6,
    "peaceful": 6,
    # 5
    "okay": 5,
    "ok": 5,
    "meh": 5,
    "neutral": 5,
    "so-so": 5,
    # 4
    "slightly down": 4,
    "not great": 4,
    "not good": 4,
    "blah": 4,
    "bored": 4,
    # 3
    "bad": 3,
    "sad": 3,
    "down": 3,
    "disappointed": 3,
    "upset": 3,
    "worried": 3,
    "lonely": 3,
    # 2
    "poor": 2,
    "stressed": 2,
    "anxious": 2,
    "frustrated": 2,
    "overwhelmed": 2,
    "angry": 2,
    # 1
    "very bad": 1,
    "terrible": 1,
    "awful": 1,
    "horrible": 1,
    "depressed": 1,
    "devastated": 1,
    "miserable": 1,
}

# Energy descriptors on a 1-10 scale
ENERGY_WORDS: dict[str, int] = {
    "energized": 10,
    "pumped": 10,
    "charged": 10,
    "high energy": 9,
    "buzzing": 9,
    "wired": 9,
    "energetic": 8,
    "active": 8,
    "vigorous": 8,
    "lively": 8,
    "alert": 7,
    "focused": 7,
    "sharp": 7,
    "steady": 6,
    "stable": 6,
    "balanced": 6,
    "normal energy": 5,
    "sluggish": 4,
    "slow": 4,
    "dull": 4,
    "tired": 3,
    "weary": 3,
    "low energy": 3,
    "dragging": 3,
    "exhausted": 2,
    "drained": 2,
    "wiped out": 2,
    "completely drained": 1,
    "dead tired": 1,
    "no energy": 1,
}

# Synchronicity significance descriptors on a 1-10 scale
SIGNIFICANCE_WORDS: dict[str, int] = {
    "life changing": 10,
    "life-changing": 10,
    "very significant": 9,
    "extremely significant": 9,
    "highly significant": 9,
    "very meaningful": 9,
    "amazing": 9,
    "incredible": 9,
    "powerful": 9,
    "significant": 7,
    "meaningful": 7,
    "important": 7,
    "interesting": 5,
    "small": 3,
    "minor": 3,
}

# Category -> keywords. Category inference picks the keyword seen first.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "wellness": (
        "meditation",
        "meditate",
        "mindfulness",
        "yoga",
        "breathing",
        "breathwork",
        "gratitude",
        "journaling",
        "self-care",
        "spiritual",
        "prayer",
    ),
    "fitness": (
        "workout",
        "exercise",
        "gym",
        "run",
        "running",
        "stretch",
        "stretching",
        "cardio",
        "walk",
        "fitness",
    ),
    "sleep": ("bedtime", "sleep", "wind down", "nap"),
    "productivity": ("work", "study", "focus", "planning", "email", "productivity"),
    "nutrition": ("breakfast", "lunch", "dinner", "meal", "diet", "water", "cooking"),
    "relationships": ("family", "friend", "friends", "partner", "relationship"),
    "finance": ("money", "budget", "savings", "invest", "debt"),
    "learning": ("read", "reading", "learn", "course", "language"),
}

# Emotion keyword -> canonical emotion
EMOTION_KEYWORDS: dict[str, str] = {
    "amazed": "amazed",
    "amazing": "amazed",
    "wow": "amazed",
    "awe": "awe",
    "chills": "awe",
    "goosebumps": "awe",
    "wonder": "wonder",
    "curious": "curious",
    "weird": "curious",
    "strange": "puzzled",
    "puzzled": "puzzled",
    "confused": "confused",
    "grateful": "grateful",
    "thankful": "grateful",
    "excited": "excited",
    "surprised": "surprised",
    "shocked": "surprised",
    "peaceful": "peaceful",
    "calm": "peaceful",
    "inspired": "inspired",
    "validated": "validated",
    "reassured": "validated",
    "joy": "joy",
    "happy": "joy",
}

# Synchronicity tag -> keywords
SYNCHRONICITY_TAG_KEYWORDS: dict[str, tuple[str, ...]] = {
    "numbers": ("number", "numbers", "angel number", "repeating numbers"),
    "dreams": ("dream", "dreamt", "dreamed", "vision"),
    "animals": ("animal", "bird", "butterfly", "hawk", "owl", "feather", "cat", "deer"),
    "people": ("person", "meeting", "met", "friend", "stranger", "called me", "texted"),
    "timing": ("timing", "perfect timing", "right when", "just as", "at the exact moment"),
    "music": ("song", "lyrics", "radio", "music"),
    "messages": ("message", "sign", "billboard", "book"),
}

# Words that mark a mood view request as a trend/history query
TREND_KEYWORDS: tuple[str, ...] = (
    "trend",
    "trends",
    "trending",
    "pattern",
    "patterns",
    "history",
    "over time",
    "analytics",
    "analysis",
    "stats",
    "progress",
    "how has my mood",
    "mood been",
)

# Belief theme -> keywords
BELIEF_THEMES: dict[str, tuple[str, ...]] = {
    "self_worth": ("worthy", "deserving", "enough", "deserve"),
    "capability": ("capable", "can", "achieve", "accomplish", "succeed", "able"),
    "abundance": ("abundance", "wealth", "money", "prosperity", "rich"),
    "health": ("health", "healthy", "strong", "energy", "body"),
    "relationships": ("love", "loved", "relationship", "connection", "friends"),
}

# Markers that make a belief statement limiting rather than empowering
LIMITING_MARKERS: tuple[str, ...] = (
    "can't",
    "cannot",
    "never",
    "not good enough",
    "not enough",
    "not worthy",
    "unworthy",
    "always fail",
    "i'm not",
    "i am not",
)

# Priority word -> canonical priority
PRIORITY_WORDS: dict[str, str] = {
    "urgent": "high",
    "critical": "high",
    "high priority": "high",
    "top priority": "high",
    "important": "medium",
    "medium priority": "medium",
    "low priority": "low",
    "someday": "low",
}

# Frequency phrase -> canonical frequency
FREQUENCY_WORDS: dict[str, str] = {
    "every day": "daily",
    "everyday": "daily",
    "daily": "daily",
    "each day": "daily",
    "weekdays": "weekdays",
    "every weekday": "weekdays",
    "weekends": "weekends",
    "every week": "weekly",
    "weekly": "weekly",
    "every month": "monthly",
    "monthly": "monthly",
}

# Time-of-day word -> canonical slot
TIME_OF_DAY_WORDS: dict[str, str] = {
    "morning": "morning",
    "wake up": "morning",
    "afternoon": "afternoon",
    "lunchtime": "afternoon",
    "evening": "evening",
    "night": "night",
    "nightly": "night",
    "bedtime": "night",
}

# Goal status words for view filters
GOAL_STATUS_WORDS: dict[str, str] = {
    "active": "active",
    "current": "active",
    "open": "active",
    "completed": "completed",
    "finished": "completed",
    "achieved": "completed",
    "done": "completed",
}

# Words that open a command, used to suggest rephrasings
ACTION_WORDS: tuple[str, ...] = (
    "add",
    "create",
    "new",
    "make",
    "start",
    "set up",
    "build",
    "log",
    "record",
    "track",
    "update",
    "edit",
    "change",
    "modify",
    "reinforce",
    "challenge",
    "show",
    "view",
    "list",
    "display",
    "see",
    "complete",
    "completed",
    "finish",
    "finished",
    "mark",
    "done",
    "achieved",
)

# Word -> entity type value it refers to
ENTITY_WORDS: dict[str, str] = {
    "routine": "routine",
    "habit": "routine",
    "belief": "belief",
    "affirmation": "belief",
    "mantra": "belief",
    "synchronicity": "synchronicity",
    "synchronicities": "synchronicity",
    "synch": "synchronicity",
    "coincidence": "synchronicity",
    "mood": "mood",
    "feeling": "mood",
    "felt": "mood",
    "goal": "goal",
}

# Common misspellings -> intended word
COMMON_TYPOS: dict[str, str] = {
    "creat": "create",
    "craete": "create",
    "updat": "update",
    "upate": "update",
    "complet": "complete",
    "shwo": "show",
    "lsit": "list",
    "rutine": "routine",
    "routin": "routine",
    "routien": "routine",
    "habbit": "habit",
    "beleif": "belief",
    "belif": "belief",
    "syncronicity": "synchronicity",
    "synchonicity": "synchronicity",
    "synchronicty": "synchronicity",
    "moood": "mood",
    "goall": "goal",
    "gaol": "goal",
    "excercise": "exercise",
    "medidation": "meditation",
    "tommorow": "tomorrow",
    "yesturday": "yesterday",
}
