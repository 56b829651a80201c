"""Configuration constants, keyword tables, and .env loading.

WHY: Centralizes every tunable value (thresholds, filler words, structural
keywords, intent sentences) so they are easy to find, update, and
override. The tables are plain data structures, not buried in logic, so both
humans and coding agents can edit them confidently.

HOW: python-dotenv loads the .env file on import. Tables are defined as
module-level dicts and tuples. Numeric thresholds can be overridden via
environment variables. Pipeline components never read these globals
directly: they receive a frozen PreprocessConfig or StructureConfig at
construction, which defaults to the values below.

RULES:
- FILLER_WORDS holds spoken disfluencies only; never add structural
  signal words ("but", "because", "首先") to it
- STRUCTURE_KEYWORDS has an entry for every SegmentType
- INTENT_TEMPLATES has a sentence for every SegmentType in every language
- Invalid config values raise ValueError at construction time
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple

from dotenv import load_dotenv

from clipstruct.core.ir import SegmentType

# Load .env from the project root (where the tool is run from)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError("{} must be a number, got {!r}".format(name, raw))


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw))


# ---------------------------------------------------------------------------
# Preprocessing thresholds
# ---------------------------------------------------------------------------

MERGE_GAP_THRESHOLD = _env_float("CLIPSTRUCT_MERGE_GAP_THRESHOLD", 0.5)
"""Seconds: adjacent captions closer than this are merged."""

MERGE_LENGTH_LIMIT = _env_int("CLIPSTRUCT_MERGE_LENGTH_LIMIT", 200)
"""Characters: merged text must stay below this length."""

SEGMENT_GAP_THRESHOLD = _env_float("CLIPSTRUCT_SEGMENT_GAP_THRESHOLD", 5.0)
"""Seconds: a gap of at least this long starts a new natural segment."""

MAX_SEGMENT_DURATION = _env_float("CLIPSTRUCT_MAX_SEGMENT_DURATION", 90.0)
"""Seconds: multi-caption segments longer than this are re-split."""

# ---------------------------------------------------------------------------
# Classification thresholds (seconds)
# ---------------------------------------------------------------------------

HOOK_WINDOW = 30.0
EARLY_HOOK_WINDOW = 15.0
CTA_TAIL_WINDOW = 60.0
TRANSITION_MAX_DURATION = 20.0
CORE_POINT_MIN_DURATION = 45.0
BACKGROUND_WINDOW = 120.0
CORE_POINT_UPGRADE_MIN_DURATION = 40.0

# ---------------------------------------------------------------------------
# Storage / history (used by the HTTP API's in-memory store)
# ---------------------------------------------------------------------------

DATA_EXPIRY_DAYS = _env_int("CLIPSTRUCT_DATA_EXPIRY_DAYS", 30)
MAX_HISTORY_ITEMS = _env_int("CLIPSTRUCT_MAX_HISTORY_ITEMS", 50)

DEFAULT_INTENT_LANGUAGE = os.getenv("CLIPSTRUCT_INTENT_LANGUAGE", "en").strip() or "en"

# ---------------------------------------------------------------------------
# Filler words (removed before analysis)
# ---------------------------------------------------------------------------

FILLER_WORDS: Dict[str, Tuple[str, ...]] = {
    "en": (
        "uh", "um", "like", "you know", "i mean", "i guess", "basically",
        "literally", "kind of", "sort of", "well", "yeah", "okay", "ok",
        "right", "so yeah", "and stuff", "or something", "or whatever",
    ),
    "zh": (
        "呃", "嗯", "啊", "哦", "那个", "就是说", "怎么说呢", "对吧", "是吧", "嗯嗯",
    ),
}

# ---------------------------------------------------------------------------
# Structural signal words per segment type
# ---------------------------------------------------------------------------

STRUCTURE_KEYWORDS: Dict[SegmentType, Tuple[str, ...]] = {
    SegmentType.HOOK: (
        "imagine", "what if", "here's the thing", "let me tell you",
        "today we're going to", "have you ever", "you won't believe", "the secret is",
        "想象", "如果", "你知道吗", "今天我们要", "秘密",
    ),
    SegmentType.BACKGROUND: (
        "background", "context", "story", "experience", "when i was",
        "a few years ago", "recently", "in the past", "the problem was",
        "背景", "故事", "经历", "几年前", "过去", "问题",
    ),
    SegmentType.CORE_POINT: (
        "the key point", "the main idea", "here's why", "the reason is",
        "most importantly", "the truth is", "actually",
        "核心", "关键", "重点", "原因", "最重要的是", "真相", "实际上",
    ),
    SegmentType.EXAMPLE: (
        "for example", "for instance", "let's take", "case study",
        "such as", "imagine if", "think about",
        "例如", "比如", "举个例子", "案例", "就像", "想象一下",
    ),
    SegmentType.TRANSITION: (
        "but", "however", "now", "moving on", "next", "then",
        "so", "therefore", "thus", "in conclusion",
        "但是", "然而", "现在", "接下来", "然后", "所以", "因此", "总之",
    ),
    SegmentType.EMOTIONAL: (
        "amazing", "incredible", "shocking", "surprising", "exciting",
        "important", "critical", "crucial", "essential",
        "惊人", "不可思议", "震惊", "令人兴奋", "重要", "关键", "至关重要",
    ),
    SegmentType.CALL_TO_ACTION: (
        "subscribe", "like", "comment", "share", "follow",
        "click", "check out", "visit", "download", "sign up",
        "订阅", "点赞", "评论", "分享", "关注", "点击", "访问", "下载", "注册",
    ),
}

# ---------------------------------------------------------------------------
# Intent sentences
# ---------------------------------------------------------------------------

INTENT_TEMPLATES: Dict[str, Dict[SegmentType, str]] = {
    "en": {
        SegmentType.HOOK: "Grabs the viewer's attention and sparks curiosity",
        SegmentType.BACKGROUND: "Provides background or sets up the context",
        SegmentType.CORE_POINT: "States the core argument or main content",
        SegmentType.EXAMPLE: "Illustrates the point with a case or example",
        SegmentType.TRANSITION: "Bridges sections and links ideas together",
        SegmentType.EMOTIONAL: "Amplifies emotion to make the message stick",
        SegmentType.CALL_TO_ACTION: "Asks the viewer to act (subscribe, like, comment)",
    },
    "zh": {
        SegmentType.HOOK: "吸引观众注意，激发好奇心",
        SegmentType.BACKGROUND: "提供背景信息或铺垫上下文",
        SegmentType.CORE_POINT: "阐述核心观点或主要内容",
        SegmentType.EXAMPLE: "通过案例或示例说明观点",
        SegmentType.TRANSITION: "承上启下，连接不同段落",
        SegmentType.EMOTIONAL: "强化情绪，增强感染力",
        SegmentType.CALL_TO_ACTION: "引导观众采取行动（订阅/点赞/评论等）",
    },
}


@dataclass(frozen=True)
class IntentRefinement:
    """A more specific intent sentence, used when a trigger phrase occurs.

    RULES:
    - triggers are matched with the same whole-phrase rule as keywords
    - intents maps a language code to the sentence in that language
    """

    triggers: Tuple[str, ...]
    intents: Mapping[str, str]


INTENT_REFINEMENTS: Dict[SegmentType, Tuple[IntentRefinement, ...]] = {
    SegmentType.HOOK: (
        IntentRefinement(("imagine", "想象"), {
            "en": "Hooks the viewer by painting an imagined scenario",
            "zh": "通过想象场景吸引观众注意",
        }),
        IntentRefinement(("what if", "如果"), {
            "en": "Sparks curiosity with a hypothetical question",
            "zh": "通过假设性问题激发好奇心",
        }),
        IntentRefinement(("secret", "秘密"), {
            "en": "Teases a secret or unknown fact to draw the viewer in",
            "zh": "揭示秘密或未知信息吸引观众",
        }),
    ),
    SegmentType.BACKGROUND: (
        IntentRefinement(("story", "故事"), {
            "en": "Tells a backstory to build an emotional connection",
            "zh": "讲述背景故事，建立情感连接",
        }),
        IntentRefinement(("experience", "经历"), {
            "en": "Shares personal experience to build credibility",
            "zh": "分享个人经历，建立可信度",
        }),
        IntentRefinement(("problem", "问题"), {
            "en": "Lays out the problem that the solution will address",
            "zh": "阐述问题背景，引出解决方案",
        }),
    ),
    SegmentType.CORE_POINT: (
        IntentRefinement(("key", "关键"), {
            "en": "Emphasizes the key takeaway",
            "zh": "强调关键要点",
        }),
        IntentRefinement(("reason", "原因"), {
            "en": "Explains the underlying reason or logic",
            "zh": "解释核心原因或逻辑",
        }),
        IntentRefinement(("truth", "真相"), {
            "en": "Reveals the truth behind the topic",
            "zh": "揭示事实真相",
        }),
    ),
    SegmentType.EXAMPLE: (
        IntentRefinement(("case", "案例"), {
            "en": "Backs the point with a real case",
            "zh": "通过真实案例说明观点",
        }),
        IntentRefinement(("instance", "例子"), {
            "en": "Gives an example to explain the core concept",
            "zh": "举例说明核心概念",
        }),
    ),
    SegmentType.TRANSITION: (
        IntentRefinement(("but", "however", "但是"), {
            "en": "Pivots to a different angle or counterpoint",
            "zh": "转折，引出不同观点或角度",
        }),
        IntentRefinement(("next", "moving on", "接下来"), {
            "en": "Moves the video on to the next topic",
            "zh": "承上启下，推进到下一话题",
        }),
    ),
    SegmentType.EMOTIONAL: (
        IntentRefinement(("amazing", "惊人"), {
            "en": "Expresses amazement to heighten the emotional impact",
            "zh": "表达惊叹，强化情绪冲击",
        }),
        IntentRefinement(("important", "重要"), {
            "en": "Stresses importance so the viewer pays attention",
            "zh": "强调重要性，引起重视",
        }),
    ),
    SegmentType.CALL_TO_ACTION: (
        IntentRefinement(("subscribe", "订阅"), {
            "en": "Asks the viewer to subscribe to the channel",
            "zh": "引导观众订阅频道",
        }),
        IntentRefinement(("like", "点赞"), {
            "en": "Asks the viewer to like the video",
            "zh": "引导观众点赞支持",
        }),
        IntentRefinement(("comment", "评论"), {
            "en": "Invites the viewer to leave a comment",
            "zh": "引导观众留言互动",
        }),
    ),
}


# ---------------------------------------------------------------------------
# Injected configuration objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PreprocessConfig:
    """Immutable settings for the normalizer and segment builder.

    RULES:
    - filler_words maps a language code to its filler phrases
    - all thresholds must be positive
    """

    filler_words: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(FILLER_WORDS)
    )
    merge_gap_threshold: float = MERGE_GAP_THRESHOLD
    merge_length_limit: int = MERGE_LENGTH_LIMIT
    segment_gap_threshold: float = SEGMENT_GAP_THRESHOLD
    max_segment_duration: float = MAX_SEGMENT_DURATION

    def __post_init__(self) -> None:
        for name in (
            "merge_gap_threshold",
            "merge_length_limit",
            "segment_gap_threshold",
            "max_segment_duration",
        ):
            if getattr(self, name) <= 0:
                raise ValueError("{} must be positive, got {}".format(name, getattr(self, name)))

    @property
    def all_fillers(self) -> Tuple[str, ...]:
        return tuple(word for words in self.filler_words.values() for word in words)


@dataclass(frozen=True)
class StructureConfig:
    """Immutable settings for the structure classifier.

    RULES:
    - keywords must list every SegmentType (an empty tuple is allowed)
    - intent_language must be a key of intent_templates
    - every template language must cover every SegmentType
    """

    keywords: Mapping[SegmentType, Tuple[str, ...]] = field(
        default_factory=lambda: dict(STRUCTURE_KEYWORDS)
    )
    intent_language: str = DEFAULT_INTENT_LANGUAGE
    intent_templates: Mapping[str, Mapping[SegmentType, str]] = field(
        default_factory=lambda: dict(INTENT_TEMPLATES)
    )
    intent_refinements: Mapping[SegmentType, Tuple[IntentRefinement, ...]] = field(
        default_factory=lambda: dict(INTENT_REFINEMENTS)
    )
    hook_window: float = HOOK_WINDOW
    early_hook_window: float = EARLY_HOOK_WINDOW
    cta_tail_window: float = CTA_TAIL_WINDOW
    transition_max_duration: float = TRANSITION_MAX_DURATION
    core_point_min_duration: float = CORE_POINT_MIN_DURATION
    background_window: float = BACKGROUND_WINDOW
    core_point_upgrade_min_duration: float = CORE_POINT_UPGRADE_MIN_DURATION

    def __post_init__(self) -> None:
        missing = [t.value for t in SegmentType if t not in self.keywords]
        if missing:
            raise ValueError("No keyword list for: {}".format(", ".join(missing)))
        if self.intent_language not in self.intent_templates:
            raise ValueError(
                "Unknown intent language {!r}. Available: {}".format(
                    self.intent_language, ", ".join(sorted(self.intent_templates))
                )
            )
        for language, templates in self.intent_templates.items():
            missing = [t.value for t in SegmentType if t not in templates]
            if missing:
                raise ValueError(
                    "Intent templates for {!r} miss: {}".format(language, ", ".join(missing))
                )

    @property
    def all_keywords(self) -> Tuple[str, ...]:
        return tuple(word for words in self.keywords.values() for word in words)
