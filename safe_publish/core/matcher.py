"""Glob pattern matching for package inclusion rules

Patterns follow gitignore syntax: ``*``, ``?``, ``[...]``, ``**``, a
leading ``!`` to negate, a leading ``/`` or inner ``/`` to anchor at the
package root, a trailing ``/`` to match directories only, a leading ``#``
for a comment. A pattern matches a path when it matches the path itself
or any of its parent directories.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Protocol, Sequence

from ..constants import MatcherKind
from ..models.manifest import IncludeRule

NEVER_MATCHES = re.compile(r'(?!)')


@dataclass(frozen=True)
class CompiledPattern:
    """A parsed gitignore-style pattern"""
    source: str
    regex: 're.Pattern'
    negated: bool
    dir_only: bool
    specificity: int

    def matches(self, path: str) -> bool:
        """Match the path or any of its parent directories"""
        parts = path.split('/')
        for i in range(1, len(parts)):
            if self.regex.fullmatch('/'.join(parts[:i])):
                return True
        if self.dir_only:
            return False
        return self.regex.fullmatch(path) is not None


def _translate(pattern: str) -> str:
    """Translate a gitignore glob body into a regex body"""
    res = []
    i, n = 0, len(pattern)

    while i < n:
        c = pattern[i]
        if c == '*':
            if pattern.startswith('**', i):
                j = i + 2
                after_slash = i == 0 or pattern[i - 1] == '/'
                if after_slash and j == n:
                    res.append('.*')
                    i = j
                    continue
                if after_slash and pattern[j] == '/':
                    # zero or more leading directories
                    res.append('(?:.*/)?')
                    i = j + 1
                    continue
                res.append('[^/]*')
                i = j
                continue
            res.append('[^/]*')
        elif c == '?':
            res.append('[^/]')
        elif c == '[':
            end = pattern.find(']', i + 2 if pattern[i + 1:i + 2] in ('!', '^') else i + 1)
            if end == -1:
                res.append(re.escape(c))
            else:
                body = pattern[i + 1:end]
                if body[:1] in ('!', '^'):
                    body = '^' + body[1:]
                res.append('[' + body.replace('\\', '\\\\') + ']')
                i = end
        elif c == '\\' and i + 1 < n:
            res.append(re.escape(pattern[i + 1]))
            i += 1
        else:
            res.append(re.escape(c))
        i += 1

    return ''.join(res)


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> CompiledPattern:
    """
    Compile a gitignore-style pattern

    Args:
        pattern: Pattern text

    Returns:
        CompiledPattern

    Raises:
        ValueError: If the pattern is empty
    """
    source = pattern
    body = pattern.rstrip(' ')

    if body.startswith('#'):
        # Comment line, matches nothing
        return CompiledPattern(source, NEVER_MATCHES, False, False, 0)

    negated = body.startswith('!')
    if negated:
        body = body[1:]
    elif body.startswith('\\!') or body.startswith('\\#'):
        body = body[1:]

    dir_only = body.endswith('/')
    body = body.rstrip('/')
    anchored = '/' in body
    body = body.lstrip('/')

    if not body:
        raise ValueError(f"Empty pattern: {source!r}")

    regex = _translate(body)
    if not anchored:
        regex = '(?:.*/)?' + regex

    specificity = len(re.sub(r'[*?\[\]!]', '', body))

    return CompiledPattern(
        source=source,
        regex=re.compile(regex, re.DOTALL),
        negated=negated,
        dir_only=dir_only,
        specificity=specificity
    )


def _rule_outcome(rule: IncludeRule, pattern: CompiledPattern) -> bool:
    # A negated pattern flips the polarity of the list it appears in
    return rule.include != pattern.negated


class PatternMatcher(Protocol):
    """Decides whether a path is selected by an ordered rule list"""

    def is_selected(self, path: str, rules: Sequence[IncludeRule], default: bool) -> bool:
        ...


class LastMatchMatcher:
    """The last matching rule decides, as in gitignore files"""

    def is_selected(self, path: str, rules: Sequence[IncludeRule], default: bool) -> bool:
        selected = default
        for rule in rules:
            pattern = compile_pattern(rule.pattern)
            if pattern.matches(path):
                selected = _rule_outcome(rule, pattern)
        return selected


class MostSpecificMatcher:
    """The matching rule with the most literal characters decides

    Ties go to the later rule.
    """

    def is_selected(self, path: str, rules: Sequence[IncludeRule], default: bool) -> bool:
        best: Optional[int] = None
        selected = default
        for rule in rules:
            pattern = compile_pattern(rule.pattern)
            if pattern.matches(path) and (best is None or pattern.specificity >= best):
                best = pattern.specificity
                selected = _rule_outcome(rule, pattern)
        return selected


def get_matcher(kind: MatcherKind) -> PatternMatcher:
    """Matcher for a configured precedence rule"""
    if kind == MatcherKind.MOST_SPECIFIC:
        return MostSpecificMatcher()
    return LastMatchMatcher()


def validate_patterns(patterns: Sequence[str]) -> List[str]:
    """Return error messages for patterns that do not compile"""
    errors = []
    for pattern in patterns:
        try:
            compile_pattern(pattern)
        except (ValueError, re.error) as e:
            errors.append(f"Invalid pattern {pattern!r}: {e}")
    return errors
