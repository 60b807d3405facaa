from __future__ import annotations

import re
from dataclasses import dataclass

from sloplint.engine.context import FileContext, SyntaxNode
from sloplint.engine.types import RuleMatch
from sloplint.rules.base import BaseRule, RuleMeta
from sloplint.suppressions import should_keep

# Every pattern is anchored right after the comment delimiter.
_DELIM = r"^(?://|#|/\*\*?)\s*"
_LINE_DELIM = r"^(?://|#)\s*"

OBVIOUS_RE = re.compile(
    _DELIM + r"(?:"
    r"initialize|create|set\s?up|handle|process|check\s(?:if|whether)|validate|update|return|"
    r"(?:get|gets|get the)|store|add|increment|decrement|define|declare|assign|call|invoke|"
    r"loop\s(?:through|over)|iterate\s(?:through|over)|import|export|render|fetch|send|"
    r"remove|delete|destroy|free|reset|clear|toggle|convert|parse|format|calculate|compute|"
    r"extract|merge|sort|filter|map|transform|append|prepend|push|pop|insert|"
    r"set the|set\s\w+\sto|allocate|malloc|realloc"
    r")\s",
    re.IGNORECASE,
)

NARRATOR_RE = re.compile(
    _DELIM + r"this\s+(?:"
    r"function|method|class|component|hook|module|handler|helper|utility|service|middleware|"
    r"guard|interceptor|decorator|factory|provider|controller|resolver|validator|pipe|filter|"
    r"struct|enum|trait|impl|macro|typedef|interface"
    r")\s+(?:"
    r"is\s+responsible\s+for|is\s+used\s+to|will|handles|creates|initializes|sets\s+up|processes|"
    r"validates|returns|manages|provides|defines|takes|accepts|receives|implements|extends|"
    r"overrides|wraps|delegates|dispatches|emits|triggers|invokes|calls|renders|fetches|sends|"
    r"removes|deletes|frees|updates|checks|ensures|converts|parses|formats|calculates|computes|"
    r"extracts|merges|sorts|filters|maps|transforms"
    r")",
    re.IGNORECASE,
)

STEP_RE = re.compile(_DELIM + r"step\s+\d", re.IGNORECASE)

DIVIDER_RES: tuple[re.Pattern[str], ...] = (
    re.compile(_LINE_DELIM + r"[-=~#*]{3,}"),
    re.compile(_LINE_DELIM + r"#{1,3}\s", re.IGNORECASE),
    re.compile(
        _LINE_DELIM + r"-{2,}\s*(?:"
        r"helpers?|utils?|types?|interfaces?|constants?|exports?|imports?|methods?|functions?|"
        r"handlers?|hooks?|state|props?|styles?|config|setup|init|main|private|public|api|routes?|"
        r"middleware|validation|rendering|lifecycle|events?|callbacks?|mutations?|actions?|"
        r"getters?|selectors?|reducers?|effects?|subscriptions?|impl|traits?|structs?|enums?|"
        r"tests?|mods?|models?|macros?"
        r")\s*-{0,}",
        re.IGNORECASE,
    ),
)

PLACEHOLDER_RE = re.compile(
    _DELIM + r"(?:"
    r"(?:\.\.\.|…)\s*(?:rest of|more|remaining|implementation|logic|code|here|functionality|"
    r"similarly|and so on|etc|as above)|"
    r"(?:omitted|truncated)\s+for\s+brevity|"
    r"implementation details omitted|"
    r"repeat (?:for each|as needed)|"
    r"handle (?:other|remaining) cases similarly|"
    r"similar for other cases"
    r")",
    re.IGNORECASE,
)

APOLOGETIC_RE = re.compile(
    _DELIM + r"(?:"
    r"sorry,? this is a (?:quick )?hack|"
    r"(?:quick|ugly|dirty|nasty) hack|"
    r"(?:quick|dirty|naive) solution|"
    r"not the best way but works|"
    r"I know this is bad|"
    r"(?:temporary|temp) (?:fix|workaround|solution|implementation|code)|"
    r"(?:fix|refactor|implement|do|clean up) (?:this )?later|"
    r"(?:good|fine|okay|ok|simple|works|good enough) for now|"
    r"simplified (?:version|implementation|logic)|"
    r"(?:basic|minimal|naive) approach|"
    r"just a placeholder"
    r")",
    re.IGNORECASE,
)

AI_GENERATED_RE = re.compile(
    _DELIM + r"(?:"
    r"As an AI,? I cannot|"
    r"I'll leave this for you to (?:implement|complete|finish)|"
    r"You'll need to add your own|"
    r"Replace this with your (?:actual|real|own) implementation|"
    r"Add your (?:code|logic) here|"
    r"Insert your (?:logic|code|handling) here|"
    r"Customize (?:as needed|according to your needs)|"
    r"Modify (?:according to|based on) your needs|"
    r"This is a (?:simplified|basic|example) (?:example|version|implementation)|"
    r"In a real application,? you (?:would|should)|"
    r"For production,? (?:consider|make sure to)|"
    r"In practice,? you (?:should|might want to)|"
    r"This is just a starting point"
    r")",
    re.IGNORECASE,
)


def comment_text(node: SyntaxNode, ctx: FileContext) -> str:
    return ctx.node_text(node).strip()


@dataclass(frozen=True, slots=True)
class CommentPatternRule(BaseRule):
    """Flags comments whose delimiter-inclusive text matches any of `patterns`."""

    meta: RuleMeta
    patterns: tuple[re.Pattern[str], ...]

    def check(self, node: SyntaxNode, ctx: FileContext) -> RuleMatch | None:
        if not ctx.language.is_comment(node.type):
            return None
        text = comment_text(node, ctx)
        if not text or should_keep(text, ctx.language):
            return None
        if not any(p.search(text) for p in self.patterns):
            return None
        return self._match()


OBVIOUS_COMMENT = CommentPatternRule(
    meta=RuleMeta(
        rule_id="obvious-comment",
        title="Obvious comment",
        message="Obvious comment — remove it, the code should speak for itself",
        note=(
            "Comments should explain WHY or document non-obvious constraints, not restate WHAT. "
            "If the code isn't clear, rename variables or extract a well-named function."
        ),
        category="comment",
    ),
    patterns=(OBVIOUS_RE,),
)

NARRATOR_COMMENT = CommentPatternRule(
    meta=RuleMeta(
        rule_id="narrator-comment",
        title="Narrator comment",
        message='"This function..." comment — let the function name and signature tell the story',
        note="A well-named function doesn't need a preamble. If behavior is non-obvious, explain WHY, not WHAT.",
        category="comment",
    ),
    patterns=(NARRATOR_RE,),
)

STEP_COMMENT = CommentPatternRule(
    meta=RuleMeta(
        rule_id="step-comment",
        title="Numbered step comment",
        message='"Step N:" comment — the function is doing too much',
        note=(
            "Numbered step comments suggest the function should be split. "
            "Extract each step into its own well-named function."
        ),
        category="comment",
    ),
    patterns=(STEP_RE,),
)

SECTION_DIVIDER = CommentPatternRule(
    meta=RuleMeta(
        rule_id="section-divider",
        title="Section divider",
        message="Section divider comment — extract into separate modules instead",
        note="If your file needs section banners, it's probably too long. Split into separate files or modules.",
        category="comment",
    ),
    patterns=DIVIDER_RES,
)

PLACEHOLDER_COMMENT = CommentPatternRule(
    meta=RuleMeta(
        rule_id="placeholder-comment",
        title="Placeholder comment",
        message="Placeholder comment — this code is incomplete",
        note='Comments like "... rest of the code" or "omitted for brevity" mean the implementation was never finished.',
        category="comment",
    ),
    patterns=(PLACEHOLDER_RE,),
)

APOLOGETIC_COMMENT = CommentPatternRule(
    meta=RuleMeta(
        rule_id="apologetic-comment",
        title="Apologetic comment",
        message="Apologetic comment — fix the code instead of apologizing for it",
        note=(
            'Comments admitting "this is a hack" or "good enough for now" are a sign the code '
            "needs actual improvement, not an apology."
        ),
        category="comment",
    ),
    patterns=(APOLOGETIC_RE,),
)

AI_GENERATED_COMMENT = CommentPatternRule(
    meta=RuleMeta(
        rule_id="ai-generated-comment",
        title="Unfinished assistant placeholder",
        message="AI-generated placeholder — the AI left a note instead of writing the code",
        note="The assistant admitted it didn't finish the job. Replace the comment with an actual implementation.",
        category="comment",
    ),
    patterns=(AI_GENERATED_RE,),
)


def builtin_comment_rules() -> list[BaseRule]:
    return [
        OBVIOUS_COMMENT,
        NARRATOR_COMMENT,
        STEP_COMMENT,
        SECTION_DIVIDER,
        PLACEHOLDER_COMMENT,
        APOLOGETIC_COMMENT,
        AI_GENERATED_COMMENT,
    ]
