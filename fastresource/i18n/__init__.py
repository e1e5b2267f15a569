# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from .service import I18n, TranslatableString, get_i18n
from .utils import _t, _ts, _


__all__ = [
    "I18n",
    "get_i18n",
    "_t",
    "_ts",
    "_",
    "TranslatableString",
]
