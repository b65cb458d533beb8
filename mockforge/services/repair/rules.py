"""
Fix rules for generated Flutter code.

Every rule is a pure, idempotent (content, path) -> content rewrite that is a
no-op when its precondition does not match. The order of DEFAULT_RULES is
load-bearing: later rules rely on the output of earlier ones.
"""

from __future__ import annotations

import posixpath
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence

THEME_PATH = "lib/core/themes/app_theme.dart"
GO_ROUTER_IMPORT = "import 'package:go_router/go_router.dart';"

THIRD_PARTY_PACKAGES: frozenset[str] = frozenset({
    "flutter",
    "flutter_test",
    "flutter_localizations",
    "go_router",
    "cupertino_icons",
    "provider",
    "riverpod",
    "http",
    "intl",
    "shared_preferences",
    "equatable",
})

# Defaults for constants extracted from circular theme declarations
ROLE_COLORS: dict[str, str] = {
    "primary": "0xFF4CAF50",
    "secondary": "0xFF2196F3",
    "tertiary": "0xFFFF9800",
    "error": "0xFFB00020",
    "surface": "0xFFFFFFFF",
}
FALLBACK_COLOR = "0xFF9C27B0"


def relative_import(target: str, from_path: str) -> str:
    """Relative import path from one project file to another."""
    return posixpath.relpath(target, posixpath.dirname(from_path) or ".")


def _insert_import(content: str, line: str, after_last: bool = False) -> str:
    imports = list(re.finditer(r"^import\s+['\"][^'\"]+['\"][^;\n]*;[ \t]*$", content, re.MULTILINE))
    if not imports:
        return f"{line}\n{content}"
    anchor = imports[-1] if after_last else imports[0]
    if after_last:
        return f"{content[:anchor.end()]}\n{line}{content[anchor.end():]}"
    return f"{content[:anchor.start()]}{line}\n{content[anchor.start():]}"


class FixRule(ABC):
    """Base class for repair rules."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique rule name."""
        ...

    def applies_to(self, path: str) -> bool:
        """Whether the rule considers this file at all."""
        return path.endswith(".dart")

    @abstractmethod
    def apply(self, content: str, path: str) -> str:
        """Rewrite the content; must return it unchanged when nothing matches."""
        ...


class SingletonCallRule(FixRule):
    """`AppRouter.router` is an instance member: call it on an instance."""

    _STATIC_CALL_RE = re.compile(r"\bAppRouter\.router\b")

    @property
    def name(self) -> str:
        return "singleton_call"

    def apply(self, content: str, path: str) -> str:
        return self._STATIC_CALL_RE.sub("AppRouter().router", content)


class ProjectImportRule(FixRule):
    """Rewrite project-internal `package:` imports under lib/ to relative paths."""

    _PACKAGE_IMPORT_RE = re.compile(
        r"(?P<directive>\b(?:import|export)\s+)(?P<quote>['\"])package:(?P<package>\w+)/(?P<rest>[^'\"]+)(?P=quote)"
    )

    def __init__(
        self,
        project_packages: Iterable[str] = ("app", "example", "flutter_app"),
        third_party: Iterable[str] = THIRD_PARTY_PACKAGES,
    ) -> None:
        self.project_packages = frozenset(project_packages)
        self.third_party = frozenset(third_party)

    @property
    def name(self) -> str:
        return "project_imports"

    def applies_to(self, path: str) -> bool:
        return path.endswith(".dart") and path.startswith("lib/")

    def is_project_package(self, package: str) -> bool:
        if package in self.third_party or package.endswith("_riverpod"):
            return False
        return package in self.project_packages or len(package) < 4

    def apply(self, content: str, path: str) -> str:
        def rewrite(match: re.Match[str]) -> str:
            if not self.is_project_package(match.group("package")):
                return match.group(0)
            target = relative_import(posixpath.join("lib", match.group("rest")), path)
            quote = match.group("quote")
            return f"{match.group('directive')}{quote}{target}{quote}"

        return self._PACKAGE_IMPORT_RE.sub(rewrite, content)


class AppRootRule(FixRule):
    """The application root wires the router through `routerConfig` only."""

    _DELEGATE_PAIR_RE = re.compile(
        r"routerDelegate:\s*[^,]+,\s*routeInformationParser:\s*[^,]+,(?:\s*routeInformationProvider:\s*[^,]+,)?"
    )
    _ROUTER_PARAM_RE = re.compile(r"(?<![\w.])router:\s*AppRouter\(\)\.router")
    _LOCAL_ROUTER_USE_RE = re.compile(r"\b_appRouter\.router\b")
    _LOCAL_ROUTER_DECL_RE = re.compile(
        r"^[ \t]*(?:static\s+)?final\s+(?:AppRouter\s+)?_appRouter\s*=\s*AppRouter\(\);?[ \t]*\n?",
        re.MULTILINE,
    )

    @property
    def name(self) -> str:
        return "app_root"

    def applies_to(self, path: str) -> bool:
        return posixpath.basename(path) == "app.dart"

    def apply(self, content: str, path: str) -> str:
        content = self._DELEGATE_PAIR_RE.sub("routerConfig: AppRouter().router,", content)
        content = self._ROUTER_PARAM_RE.sub("routerConfig: AppRouter().router", content)
        content = self._LOCAL_ROUTER_USE_RE.sub("AppRouter().router", content)
        without_local = self._LOCAL_ROUTER_DECL_RE.sub("", content)
        if without_local != content and not re.search(r"\b_appRouter\b", without_local):
            content = without_local
        return content


Replacement = str | Callable[[re.Match[str]], str]


def _capitalized_constant(match: re.Match[str]) -> str:
    member = match.group("member")
    return f"{match.group('prefix')}colorScheme{member[0].upper()}{member[1:]}"


DEPRECATED_APIS: tuple[tuple[str, Replacement], ...] = (
    (r"\bRaisedButton\b", "ElevatedButton"),
    (r"\bFlatButton\b", "TextButton"),
    (r"\bOutlineButton\b", "OutlinedButton"),
    (r"\bTheme\.of\(context\)\.primaryColor\b", "Theme.of(context).colorScheme.primary"),
    (r"\bTheme\.of\(context\)\.accentColor\b", "Theme.of(context).colorScheme.secondary"),
    (r"(textTheme[!?]?)\.headline1\b", r"\1.displayLarge"),
    (r"(textTheme[!?]?)\.headline2\b", r"\1.displayMedium"),
    (r"(textTheme[!?]?)\.headline3\b", r"\1.displaySmall"),
    (r"(textTheme[!?]?)\.headline4\b", r"\1.headlineMedium"),
    (r"(textTheme[!?]?)\.headline5\b", r"\1.headlineSmall"),
    (r"(textTheme[!?]?)\.headline6\b", r"\1.titleLarge"),
    (r"(textTheme[!?]?)\.subtitle1\b", r"\1.titleMedium"),
    (r"(textTheme[!?]?)\.subtitle2\b", r"\1.titleSmall"),
    (r"(textTheme[!?]?)\.bodyText1\b", r"\1.bodyLarge"),
    (r"(textTheme[!?]?)\.bodyText2\b", r"\1.bodyMedium"),
    (r"(textTheme[!?]?)\.caption\b", r"\1.bodySmall"),
    (r"(textTheme[!?]?)\.button\b", r"\1.labelLarge"),
    (r"(textTheme[!?]?)\.overline\b", r"\1.labelSmall"),
    # `static const Color colorScheme.primary` is not a valid identifier
    (r"(?P<prefix>\bstatic\s+const\s+Color\s+)colorScheme\.(?P<member>\w+)", _capitalized_constant),
)


class DeprecatedApiRule(FixRule):
    """Mechanical deprecated -> current API renames from a fixed table."""

    def __init__(self, table: Sequence[tuple[str, Replacement]] = DEPRECATED_APIS) -> None:
        self.table = [(re.compile(pattern), replacement) for pattern, replacement in table]

    @property
    def name(self) -> str:
        return "deprecated_apis"

    def apply(self, content: str, path: str) -> str:
        for pattern, replacement in self.table:
            content = pattern.sub(replacement, content)
        return content


_STATIC_DECL_RE = re.compile(
    r"\bstatic\s+(?:final|const|late\s+final)\s+"
    r"(?:[A-Za-z_][\w.]*(?:<[^=;{}]*>)?\??\s+)?"
    r"(?P<name>[A-Za-z_]\w*)\s*=(?![=>])\s*"
)
_NAMED_COLOR_RE = re.compile(r"\b(?P<role>\w+):\s*(?:const\s+)?Color\(\s*(?P<value>0x[0-9A-Fa-f]{8})\s*\)")
_CLOSERS = {")": "(", "]": "[", "}": "{"}


def _skip_string(content: str, i: int) -> int:
    char = content[i]
    quote = char * 3 if content[i:i + 3] == char * 3 else char
    i += len(quote)
    while i < len(content) and not content.startswith(quote, i):
        i += 2 if content[i] == "\\" else 1
    return i + len(quote)


def initializer_end(content: str, start: int) -> int | None:
    """Offset of the ';' ending the initializer that starts at `start`.

    Brackets are balanced and string literals skipped. Returns None when the
    statement never terminates.
    """
    depth = 0
    i = start
    while i < len(content):
        char = content[i]
        if char in "'\"":
            i = _skip_string(content, i)
            continue
        if char in "([{":
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth < 0:
                return None
        elif char == ";" and depth == 0:
            return i
        i += 1
    return None


def block_end(content: str, open_brace: int) -> int:
    """Offset just past the '}' closing the block opened at `open_brace`.

    String literals are skipped. An unclosed block runs to the end of content.
    """
    depth = 0
    i = open_brace
    while i < len(content):
        char = content[i]
        if char in "'\"":
            i = _skip_string(content, i)
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return len(content)


def constant_name(variable: str, member: str) -> str:
    """Name of the constant extracted for `variable.member` (`_colorScheme.primary` -> `colorSchemePrimary`)."""
    return f"{variable.lstrip('_')}{member[0].upper()}{member[1:]}"


class CircularReferenceRule(FixRule):
    """Break static declarations whose initializer reads the value being declared.

    `static final ColorScheme _colorScheme = ColorScheme.fromSeed(seedColor: _colorScheme.primary)`
    becomes literal `static const Color` constants followed by a declaration
    that references them instead of itself.
    """

    @property
    def name(self) -> str:
        return "circular_reference"

    def apply(self, content: str, path: str) -> str:
        position = 0
        while True:
            match = _STATIC_DECL_RE.search(content, position)
            if match is None:
                return content
            end = initializer_end(content, match.end())
            if end is None:
                position = match.end()
                continue

            name = match.group("name")
            initializer = content[match.end():end]
            self_reference = re.compile(rf"(?<![\w.]){re.escape(name)}\.(\w+)")
            members = list(dict.fromkeys(self_reference.findall(initializer)))
            if not members:
                position = end + 1
                continue

            replacement = self._rewrite(content, match, initializer, name, members, self_reference)
            content = content[:match.start()] + replacement + content[end + 1:]
            position = match.start() + len(replacement)

    @staticmethod
    def _rewrite(
        content: str,
        match: re.Match[str],
        initializer: str,
        name: str,
        members: list[str],
        self_reference: re.Pattern[str],
    ) -> str:
        line_start = content.rfind("\n", 0, match.start()) + 1
        indent = content[line_start:match.start()]
        if indent.strip():
            indent = ""

        literals = {m.group("role"): m.group("value") for m in _NAMED_COLOR_RE.finditer(initializer)}
        lines = []
        for member in members:
            constant = constant_name(name, member)
            if re.search(rf"\bstatic\s+const\s+(?:Color\s+)?{constant}\b", content):
                continue
            value = literals.get(member) or ROLE_COLORS.get(member, FALLBACK_COLOR)
            lines.append(f"static const Color {constant} = Color({value});")

        rewritten = self_reference.sub(lambda m: constant_name(name, m.group(1)), initializer)
        lines.append(f"{content[match.start():match.end()]}{rewritten};")
        return f"\n{indent}".join(lines)


class ExtractedConstantRenameRule(FixRule):
    """Route remaining `_x.member` reads to the constants extracted for `_x`."""

    _CONSTANT_DECL_RE = re.compile(r"\bstatic\s+const\s+Color\s+(?P<name>[A-Za-z]\w*)\s*=")
    _PRIVATE_STATIC_RE = re.compile(
        r"\bstatic\s+(?:final|const|late\s+final)\s+(?:[A-Za-z_][\w.]*(?:<[^=;{}]*>)?\??\s+)?(?P<name>_\w+)\s*="
    )

    @property
    def name(self) -> str:
        return "extracted_constant_renames"

    def apply(self, content: str, path: str) -> str:
        constants = {m.group("name") for m in self._CONSTANT_DECL_RE.finditer(content)}
        if not constants:
            return content

        for variable in {m.group("name") for m in self._PRIVATE_STATIC_RE.finditer(content)}:
            def rename(match: re.Match[str], variable: str = variable) -> str:
                constant = constant_name(variable, match.group(1))
                return constant if constant in constants else match.group(0)

            content = re.sub(rf"(?<![\w.]){re.escape(variable)}\.(\w+)\b", rename, content)
        return content


_BUILD_RE = re.compile(r"\bWidget\s+build\s*\(\s*BuildContext\s+context\s*\)\s*(?:async\s*)?\{")
_COLOR_PROPERTY = (
    r"(?P<prop>\b(?:color|backgroundColor|foregroundColor|iconColor|fillColor|"
    r"selectedItemColor|indicatorColor|activeColor|splashColor)\s*:\s*)"
)
_THEME_REFERENCES: tuple[tuple[re.Pattern[str], str], ...] = (
    (
        re.compile(
            _COLOR_PROPERTY
            + r"(?:AppTheme\.(?:primary|primaryColor|colorSchemePrimary)|(?<![\w.])colorSchemePrimary)\b"
        ),
        "primary",
    ),
    (
        re.compile(
            _COLOR_PROPERTY
            + r"(?:AppTheme\.(?:secondary|secondaryColor|colorSchemeSecondary|secondaryBlue)"
            r"|(?<![\w.])(?:colorSchemeSecondary|secondaryBlue))\b"
        ),
        "secondary",
    ),
)
_BARE_COLOR_SCHEME_RE = re.compile(r"(?<![\w.])colorScheme\.")
_COLOR_SCHEME_LOCAL_RE = re.compile(r"\b(?:final|var|const)\s+(?:ColorScheme\s+)?colorScheme\s*=")
_COLOR_SCHEME_MEMBER_RE = re.compile(r"\bColorScheme\??\s+colorScheme\b")


class ThemeLookupRule(FixRule):
    """Render code reads colors through `Theme.of(context)`, not seed constants."""

    @property
    def name(self) -> str:
        return "theme_lookup"

    def apply(self, content: str, path: str) -> str:
        builds = list(_BUILD_RE.finditer(content))
        if not builds:
            return content

        # Fields and static initializers have no context; only build bodies are rewritten
        declare = not _COLOR_SCHEME_MEMBER_RE.search(content)
        for build in reversed(builds):
            end = block_end(content, build.end() - 1)
            body = self._lookups(content[build.end():end])
            if declare and _BARE_COLOR_SCHEME_RE.search(body) and not _COLOR_SCHEME_LOCAL_RE.search(body):
                line_start = content.rfind("\n", 0, build.start()) + 1
                indent = re.match(r"[ \t]*", content[line_start:]).group(0) + "  "
                body = f"\n{indent}final colorScheme = Theme.of(context).colorScheme;" + body
            content = content[:build.end()] + body + content[end:]
        return content

    @staticmethod
    def _lookups(body: str) -> str:
        for pattern, role in _THEME_REFERENCES:
            body = pattern.sub(rf"\g<prop>Theme.of(context).colorScheme.{role}", body)
        return re.sub(
            r"\bTheme\.of\(context\)\.colorScheme(Primary|Secondary)\b",
            lambda m: f"Theme.of(context).colorScheme.{m.group(1).lower()}",
            body,
        )


class ImportInsertionRule(FixRule):
    """Add imports for capabilities used without them."""

    _GO_ROUTER_USE_RE = re.compile(
        r"\bcontext\.(?:push|pop|go|goNamed|pushNamed|pushReplacement|replace|canPop)\("
    )
    _APP_THEME_USE_RE = re.compile(r"\bAppTheme\.")

    @property
    def name(self) -> str:
        return "import_insertion"

    def apply(self, content: str, path: str) -> str:
        if self._GO_ROUTER_USE_RE.search(content) and "package:go_router/go_router.dart" not in content:
            content = _insert_import(content, GO_ROUTER_IMPORT)

        if (
            self._APP_THEME_USE_RE.search(content)
            and path.startswith("lib/")
            and path != THEME_PATH
            and "app_theme.dart" not in content
            and not re.search(r"\bclass\s+AppTheme\b", content)
        ):
            content = _insert_import(content, f"import '{relative_import(THEME_PATH, path)}';", after_last=True)
        return content


def default_rules(project_packages: Iterable[str] = ("app", "example", "flutter_app")) -> list[FixRule]:
    """The standard rule sequence in its load-bearing order."""
    return [
        SingletonCallRule(),
        ProjectImportRule(project_packages=project_packages),
        AppRootRule(),
        DeprecatedApiRule(),
        CircularReferenceRule(),
        ExtractedConstantRenameRule(),
        ThemeLookupRule(),
        ImportInsertionRule(),
    ]
