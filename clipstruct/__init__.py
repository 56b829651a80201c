"""ClipStruct: rule-based rhetorical structure analysis for video captions.

WHY: Long-form videos follow recognisable rhetorical shapes (hook, context,
core argument, examples, call to action). Editors and researchers want that
shape as a timeline without watching the whole video. Captions already carry
the words and the timing, so a deterministic rule engine over captions can
produce a useful first draft of the structure.

HOW: Three-stage pipeline: preprocess (filler removal, short-caption merge,
natural segmentation), classify (ordered keyword/position rules plus a
post-processing pass), report (statistics and pluggable exporters). Each
stage is a pure function over immutable value objects.

RULES:
- The core never performs I/O; caption fetching and storage live outside it
- Keyword, filler, and threshold tables are configuration, injected at construction
- The IR in clipstruct.core.ir is the stable contract between stages
"""

__version__ = "0.1.0"
