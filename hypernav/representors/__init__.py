"""Representor implementations."""

from hypernav.representor import Representor
from hypernav.representors.hal import HalRepresentor
from hypernav.representors.html import HtmlRepresentor
from hypernav.representors.jsonapi import JsonApiRepresentor
from hypernav.representors.plain import PlainRepresentor

REPRESENTORS: dict[str, type[Representor]] = {
    "hal": HalRepresentor,
    "jsonapi": JsonApiRepresentor,
    "html": HtmlRepresentor,
    "plain": PlainRepresentor,
}

__all__ = ["REPRESENTORS", "HalRepresentor", "HtmlRepresentor", "JsonApiRepresentor", "PlainRepresentor"]
