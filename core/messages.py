"""User-facing messages in the locales the upgrade speaks."""

DEFAULT_LOCALE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "no_solution": "No Modern.js solution was found in package.json",
        "more_solution": "More than one Modern.js solution was found in package.json: {solutions}",
        "project_type": "Project type",
        "modern_version": "Modern.js version",
        "loading": "Resolving versions...",
        "success": "Upgrade finished successfully!",
    },
    "zh": {
        "no_solution": "未在 package.json 中识别到 Modern.js 工程方案",
        "more_solution": "package.json 中存在多个 Modern.js 工程方案: {solutions}",
        "project_type": "项目类型",
        "modern_version": "Modern.js 版本",
        "loading": "正在解析版本...",
        "success": "升级成功！",
    },
}


def t(key: str, locale: str | None = None, **kwargs) -> str:
    """Look up a message, falling back to English for unknown locales."""
    table = MESSAGES.get(locale or DEFAULT_LOCALE, MESSAGES[DEFAULT_LOCALE])
    message = table.get(key, MESSAGES[DEFAULT_LOCALE][key])
    return message.format(**kwargs) if kwargs else message
