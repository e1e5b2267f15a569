# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.i18n.service import TranslatableString


def _ts(message: str, **kwargs) -> TranslatableString:
    """
    Build a translatable string, translated with the locale active when rendered.

    Usage:
        from fastresource.i18n import _ts

        message: TranslatableString = _ts("The {field} field is required.", field="title")
    """
    return TranslatableString(message, **kwargs)


def _t(message: str, **kwargs) -> str:
    """
    Translate a message using the current locale and return it as a string immediately.

    Usage:
        from fastresource.i18n import _t

        message: str = _t("The {field} field is required.", field="title")
    """
    return str(TranslatableString(message, **kwargs))


_ = _t


__all__ = [
    "_ts",
    "_t",
    "_",
]
