"""
Local Flutter Template Service.

Deterministic project generator used whenever remote generation is
unavailable or unusable. Output is already in repaired form.
"""

from __future__ import annotations

import re

from ...core.logging import get_logger
from ...models.generation import to_package_name
from ...models.screens import ScreenDetectionResult, ScreenSection, ThemePalette
from ..prompting.enrichment import screens_from_prompt
from ..prompting.service import drawer_routes

logger = get_logger(__name__)

THEME_PATH = "lib/core/themes/app_theme.dart"
ROUTER_PATH = "lib/core/router/app_router.dart"
DRAWER_PATH = "lib/shared/widgets/app_drawer.dart"


def dart_string(text: str) -> str:
    """Single-quoted Dart string literal."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("$", "\\$")
        .replace("\n", "\\n")
    )
    return f"'{escaped}'"


def display_name(title: str) -> str:
    """'CreateProjectScreen' -> 'Create Project'."""
    stem = title[: -len("Screen")] if title.endswith("Screen") else title
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", stem) or "Home"


def class_name(title: str) -> str:
    return title if title[:1].isalpha() else f"Screen{title}"


def feature_name(title: str) -> str:
    """'CreateProjectScreen' -> 'create_project'."""
    return to_package_name(display_name(title), default="home")


def screen_path(section: ScreenSection) -> str:
    feature = feature_name(section.title)
    return f"lib/features/{feature}/screens/{feature}_screen.dart"


class FlutterTemplateGenerator:
    """Service for generating Flutter projects from local templates."""

    def generate(
        self,
        app_name: str,
        detection: ScreenDetectionResult | None = None,
        prompt: str | None = None,
        palette: ThemePalette | None = None,
    ) -> dict[str, str]:
        """Generate a complete Flutter project.

        Args:
            app_name: App name; normalized to a Dart package name.
            detection: Screen detection result, when a mockup was given.
            prompt: Natural-language description, used when no screens were detected.
            palette: Seed colors for the theme.

        Returns:
            Mapping of project-relative path to file content.
        """
        package = to_package_name(app_name)
        sections = self._sections(detection, prompt)
        with_drawer = len(sections) > 1 or bool(detection and detection.should_create_drawer)
        palette = palette or ThemePalette()

        files = {
            "pubspec.yaml": self._pubspec(package, prompt),
            "README.md": self._readme(package, sections),
            "lib/main.dart": self._main(),
            "lib/app.dart": self._app(package),
            ROUTER_PATH: self._router(sections),
            THEME_PATH: self._theme(palette),
        }
        if with_drawer:
            files[DRAWER_PATH] = self._drawer(package, sections)
        for section in sections:
            files[screen_path(section)] = self._screen(section, with_drawer)

        logger.info("Template project generated", app_name=package, screens=len(sections), files=len(files))
        return files

    @staticmethod
    def _sections(detection: ScreenDetectionResult | None, prompt: str | None) -> list[ScreenSection]:
        if detection and detection.screen_sections:
            return list(detection.screen_sections)
        if prompt:
            requested = screens_from_prompt(prompt)
            if requested:
                return requested
        texts = tuple(detection.all_texts[:5]) if detection else ()
        return [ScreenSection(title="HomeScreen", description="Home", texts=texts)]

    def _pubspec(self, package: str, prompt: str | None) -> str:
        description = (prompt or "A Flutter application.").strip().splitlines()[0][:120]
        description = description.replace('"', "'")
        return f'''name: {package}
description: "{description}"
publish_to: 'none'
version: 1.0.0+1

environment:
  sdk: '>=3.3.0 <4.0.0'

dependencies:
  flutter:
    sdk: flutter
  go_router: ^14.2.0
  cupertino_icons: ^1.0.8

dev_dependencies:
  flutter_test:
    sdk: flutter
  flutter_lints: ^4.0.0

flutter:
  uses-material-design: true
'''

    def _readme(self, package: str, sections: list[ScreenSection]) -> str:
        screens = "\n".join(f"- {s.title}: {s.description}" for s in sections)
        return f"""# {package}

Generated Flutter application.

## Screens

{screens}

## Run

```
flutter pub get
flutter run
```
"""

    def _main(self) -> str:
        return """import 'package:flutter/material.dart';

import 'app.dart';

void main() {
  runApp(const MyApp());
}
"""

    def _app(self, package: str) -> str:
        return f"""import 'package:flutter/material.dart';

import 'core/router/app_router.dart';
import 'core/themes/app_theme.dart';

class MyApp extends StatelessWidget {{
  const MyApp({{super.key}});

  @override
  Widget build(BuildContext context) {{
    return MaterialApp.router(
      title: {dart_string(display_name(package.title().replace("_", "")))},
      debugShowCheckedModeBanner: false,
      theme: AppTheme.lightTheme,
      darkTheme: AppTheme.darkTheme,
      routerConfig: AppRouter().router,
    );
  }}
}}
"""

    def _router(self, sections: list[ScreenSection]) -> str:
        imports = "\n".join(
            f"import '../../{screen_path(s)[len('lib/'):]}';" for s in sections
        )
        routes = "\n".join(
            f"      GoRoute(\n        path: '{route}',\n        builder: (context, state) => const {class_name(title)}(),\n      ),"
            for route, title in drawer_routes(sections)
        )
        return f"""import 'package:go_router/go_router.dart';

{imports}

class AppRouter {{
  static final AppRouter _instance = AppRouter._internal();

  factory AppRouter() => _instance;

  AppRouter._internal();

  final GoRouter router = GoRouter(
    initialLocation: '/',
    routes: [
{routes}
    ],
  );
}}
"""

    def _theme(self, palette: ThemePalette) -> str:
        return f"""import 'package:flutter/material.dart';

class AppTheme {{
  static const Color seedColor = Color({palette.primary});
  static const Color secondarySeed = Color({palette.secondary});
  static const Color accentSeed = Color({palette.accent});

  static ThemeData get lightTheme => ThemeData(
        useMaterial3: true,
        colorScheme: ColorScheme.fromSeed(
          seedColor: seedColor,
          secondary: secondarySeed,
          tertiary: accentSeed,
        ),
      );

  static ThemeData get darkTheme => ThemeData(
        useMaterial3: true,
        colorScheme: ColorScheme.fromSeed(
          seedColor: seedColor,
          brightness: Brightness.dark,
        ),
      );
}}
"""

    def _drawer(self, package: str, sections: list[ScreenSection]) -> str:
        tiles = "\n".join(
            f"""          ListTile(
            leading: const Icon(Icons.{'home' if route == '/' else 'chevron_right'}),
            title: Text({dart_string(display_name(title))}),
            onTap: () => context.go('{route}'),
          ),"""
            for route, title in drawer_routes(sections)
        )
        return f"""import 'package:flutter/material.dart';
import 'package:go_router/go_router.dart';

class AppDrawer extends StatelessWidget {{
  const AppDrawer({{super.key}});

  @override
  Widget build(BuildContext context) {{
    final colorScheme = Theme.of(context).colorScheme;
    return Drawer(
      child: ListView(
        padding: EdgeInsets.zero,
        children: [
          DrawerHeader(
            decoration: BoxDecoration(color: colorScheme.primary),
            child: Text(
              {dart_string(package)},
              style: TextStyle(color: colorScheme.onPrimary, fontSize: 22),
            ),
          ),
{tiles}
        ],
      ),
    );
  }}
}}
"""

    def _screen(self, section: ScreenSection, with_drawer: bool) -> str:
        name = class_name(section.title)
        drawer_import = ""
        drawer_line = ""
        if with_drawer:
            depth = screen_path(section).count("/") - 1
            drawer_import = f"\nimport '{'../' * depth}shared/widgets/app_drawer.dart';\n"
            drawer_line = "\n      drawer: const AppDrawer(),"

        controllers = "\n".join(
            f"    {dart_string(field)}: TextEditingController()," for field in section.fields
        )
        selections = "\n".join(
            f"  String? _selection{i} = {dart_string(group.selected.text) if group.selected else 'null'};"
            for i, group in enumerate(section.radio_groups)
        )
        children = self._screen_children(section)

        return f"""import 'package:flutter/material.dart';
{drawer_import}
class {name} extends StatefulWidget {{
  const {name}({{super.key}});

  @override
  State<{name}> createState() => _{name}State();
}}

class _{name}State extends State<{name}> {{
  final _formKey = GlobalKey<FormState>();
  final Map<String, TextEditingController> _controllers = {{
{controllers}
  }};
{selections}

  @override
  void dispose() {{
    for (final controller in _controllers.values) {{
      controller.dispose();
    }}
    super.dispose();
  }}

  void _onAction(String label) {{
    if (_formKey.currentState?.validate() ?? true) {{
      ScaffoldMessenger.of(context).showSnackBar(SnackBar(content: Text(label)));
    }}
  }}

  @override
  Widget build(BuildContext context) {{
    final colorScheme = Theme.of(context).colorScheme;
    return Scaffold(
      appBar: AppBar(
        title: Text({dart_string(display_name(section.title))}),
        backgroundColor: colorScheme.primaryContainer,
      ),{drawer_line}
      body: SingleChildScrollView(
        padding: const EdgeInsets.all(16),
        child: Form(
          key: _formKey,
          child: Column(
            crossAxisAlignment: CrossAxisAlignment.stretch,
            children: [
{children}
            ],
          ),
        ),
      ),
    );
  }}
}}
"""

    @staticmethod
    def _screen_children(section: ScreenSection) -> str:
        indent = " " * 14
        claimed = set(section.fields) | set(section.buttons)
        widgets = []
        for text in section.texts:
            if text in claimed:
                continue
            widgets.append(f"Text({dart_string(text)}, style: Theme.of(context).textTheme.titleMedium),")
            widgets.append("const SizedBox(height: 12),")
        for field in section.fields:
            widgets.append(
                f"TextFormField(\n{indent}  controller: _controllers[{dart_string(field)}],\n"
                f"{indent}  decoration: InputDecoration(labelText: {dart_string(field)}, border: const OutlineInputBorder()),\n"
                f"{indent}),"
            )
            widgets.append("const SizedBox(height: 12),")
        for i, group in enumerate(section.radio_groups):
            widgets.append(f"Text({dart_string(group.title)}, style: Theme.of(context).textTheme.titleSmall),")
            for option in group.options:
                widgets.append(
                    f"RadioListTile<String>(\n{indent}  title: Text({dart_string(option.text)}),\n"
                    f"{indent}  value: {dart_string(option.text)},\n"
                    f"{indent}  groupValue: _selection{i},\n"
                    f"{indent}  onChanged: (value) => setState(() => _selection{i} = value),\n"
                    f"{indent}),"
                )
        for index, button in enumerate(section.buttons):
            widget = "FilledButton" if index == 0 else "OutlinedButton"
            widgets.append(
                f"{widget}(\n{indent}  onPressed: () => _onAction({dart_string(button)}),\n"
                f"{indent}  child: Text({dart_string(button)}),\n{indent}),"
            )
            widgets.append("const SizedBox(height: 8),")
        if not widgets:
            widgets.append(f"Text({dart_string(section.description or display_name(section.title))}),")
        return "\n".join(indent + w for w in widgets)
