# -*- coding: utf-8; mode: python; tab-width: 3; indent-tabs-mode: nil -*-
#
# Copyright 2015-2017 Raffaello D. Di Napoli
#
# This file is part of Canonyaml.
#
# Canonyaml is free software: you can redistribute it and/or modify it under the terms of the GNU General
# Public License as published by the Free Software Foundation, either version 3 of the License, or (at your
# option) any later version.
#
# Canonyaml is distributed in the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the
# implied warranty of MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU General Public License
# for more details.
#
# You should have received a copy of the GNU General Public License along with Canonyaml. If not, see
# <http://www.gnu.org/licenses/>.
#-------------------------------------------------------------------------------------------------------------

"""YAML resolver: converts nodes into Python objects."""

import base64
import binascii
import collections
import collections.abc
import datetime
import re

import canonyaml
import canonyaml.logging
from canonyaml.nodes import ScalarNode
from canonyaml.scanner import ScalarStyle


##############################################################################################################

SCALAR_BOOL      = 0b0000001
SCALAR_FLOAT     = 0b0000010
SCALAR_INT       = 0b0000100
SCALAR_NULL      = 0b0001000
SCALAR_TIMESTAMP = 0b0010000
# Octal integers (0o14); extension to the core schema.
SCALAR_OCTAL     = 0b0100000
# .inf, -.inf and .nan floats; extension to the core schema.
SCALAR_INF_NAN   = 0b1000000
SCALAR_CORE      = SCALAR_BOOL | SCALAR_FLOAT | SCALAR_INT | SCALAR_NULL | SCALAR_TIMESTAMP
SCALAR_ALL       = SCALAR_CORE | SCALAR_OCTAL | SCALAR_INF_NAN

# Prefix that the “!!” tag handle expands to.
YAML_TAG_PREFIX = 'tag:yaml.org,2002:'

def resolve_scalar(text, tag=None):
   """Resolves a plain scalar using the default tag registry.

   str text
      Text of the scalar.
   str tag
      Explicit tag, either fully expanded or in “!!” shorthand form.
   object return
      Resolved value.
   """

   if tag is not None:
      tag = TagRegistry.expand_shorthand(tag)
   return Resolver().resolve(ScalarNode(text, ScalarStyle.PLAIN, tag))

def _make_values_int(kwargs):
   """Converts the values of its argument into int instances.

   dict(str: str) kwargs
      Dictionary containing string values to convert.
   dict(str: int) return
      Converted values; keys with empty values are omitted.
   """

   ret = {}
   for key, value in kwargs.items():
      if value:
         ret[key] = int(value, 10)
   return ret

def _date_to_datetime(**kwargs):
   """Constructs a datetime.datetime object for midnight UTC of the specified date.

   dict(str: str) **kwargs
      Values parsed from the regular expression matching a YAML date.
   datetime.datetime return
      Object containing the timestamp.
   """

   return datetime.datetime(tzinfo=canonyaml.UTC, **_make_values_int(kwargs))

def _timestamp_to_datetime(**kwargs):
   """Constructs a datetime.datetime object by tweaking the arguments provided.

   dict(str: str) **kwargs
      Values parsed from the regular expression matching a YAML timestamp.
   datetime.datetime return
      Object containing the timestamp.
   """

   # Convert the generic “fraction” part into “microsecond”. This needs to be done while it’s still a string,
   # otherwise we won’t be able to tell the difference between “001” (1 ms) and “000001” (1 µs).
   fraction = kwargs.pop('fraction', None)
   if fraction:
      if len(fraction) == 6:
         # Already microseconds.
         microsecs = fraction
      elif len(fraction) < 6:
         # Too few digits; add some padding to multiply by the appropriate power of 10.
         microsecs = fraction.ljust(6, '0')
      else:
         # Too many digits; drop the excess.
         microsecs = fraction[0:6]
      kwargs['microsecond'] = microsecs
   tz = kwargs.pop('tz', None)
   negative_tz = tz is not None and tz.startswith('-')

   kwargs = _make_values_int(kwargs)

   tz_hour = kwargs.pop('tzhour', 0)
   tz_minute = kwargs.pop('tzminute', 0)
   if abs(tz_hour) > 23 or tz_minute > 59:
      raise ValueError('time zone offset out of range: {}'.format(tz))
   if negative_tz:
      # “-05:30” is five and a half hours west of UTC.
      tz_minute = -tz_minute
   if not tz or tz == 'Z':
      # No time zone means UTC.
      kwargs['tzinfo'] = canonyaml.UTC
   else:
      kwargs['tzinfo'] = canonyaml.TimestampTZInfo(tz, tz_hour, tz_minute)

   return datetime.datetime(**kwargs)

# Matchers and convertors for stock scalar types (see YAML 1.2 § 10.3.2. “Tag Resolution”), in order of
# precedence. Each entry only applies if all of its SCALAR_* bits are selected.
_scalar_tag_conversions = (
   (SCALAR_NULL, re.compile(r'^(?:|~|NULL|[Nn]ull)$'), None),

   (SCALAR_BOOL, re.compile(r'^(?:TRUE|[Tt]rue)$'  ), True),
   (SCALAR_BOOL, re.compile(r'^(?:FALSE|[Ff]alse)$'), False),

   (SCALAR_INT,                re.compile(r'^(?P<s>[-+]?\d+)$'      ), lambda s: int(s, 10)),
   (SCALAR_INT | SCALAR_OCTAL, re.compile(r'^0o(?P<s>[0-7]+)$'      ), lambda s: int(s,  8)),
   (SCALAR_INT,                re.compile(r'^0x(?P<s>[0-9A-Fa-f]+)$'), lambda s: int(s, 16)),

   (SCALAR_FLOAT | SCALAR_INF_NAN, re.compile(r'^\+?\.(?:INF|[Ii]nf)$'), float('inf')),
   (SCALAR_FLOAT | SCALAR_INF_NAN, re.compile(r'^-\.(?:INF|[Ii]nf)$'  ), float('-inf')),
   (SCALAR_FLOAT | SCALAR_INF_NAN, re.compile(r'^\.(?:N[Aa]N|nan)$'   ), float('nan')),
   (
      SCALAR_FLOAT,
      re.compile(r'^(?P<x>[-+]?(?:\.\d+|\d+(?:\.\d*)?)(?:[Ee][-+]?\d+)?)$'),
      lambda x: float(x)
   ),

   # See <http://yaml.org/type/timestamp.html>.
   (
      SCALAR_TIMESTAMP,
      re.compile(r'^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})$'),
      _date_to_datetime
   ),
   (
      SCALAR_TIMESTAMP,
      re.compile(r'''^
         (?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})
         (?:[Tt]|[\t ]+)
         (?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})
         (\.(?P<fraction>\d+))?
         (?:(?:[\t ]*)
            (?P<tz>Z|(?P<tzhour>[-+]\d{1,2})(?::?(?P<tzminute>\d{2}))?)
         )?
      $''', re.VERBOSE),
      _timestamp_to_datetime
   ),
)

##############################################################################################################

class TaggedValue(object):
   """Value of a node with an explicit tag that has no registered constructor. Allows the caller to dispatch
   on the tag.
   """

   # Full tag of the node.
   tag = None
   # Value the node would have resolved to without the tag: str, list or dict.
   value = None

   def __init__(self, tag, value):
      """Constructor.

      str tag
         Full tag of the node.
      object value
         Untagged value.
      """

      self.tag = tag
      self.value = value

   def __eq__(self, other):
      return isinstance(other, TaggedValue) and self.tag == other.tag and self.value == other.value

   def __ne__(self, other):
      return not self.__eq__(other)

   def __hash__(self):
      return hash((self.tag, self.value))

   def __repr__(self):
      return 'TaggedValue({!r}, {!r})'.format(self.tag, self.value)

##############################################################################################################

class FrozenMapping(collections.abc.Mapping):
   """Immutable, hashable mapping; used in place of dict for mappings that are themselves mapping keys."""

   def __init__(self, pairs=()):
      """Constructor.

      iterable(tuple(object, object)) pairs
         Key/value pairs; keys and values must be hashable.
      """

      self._dict = dict(pairs)
      self._hash = None

   def __getitem__(self, key):
      return self._dict[key]

   def __hash__(self):
      if self._hash is None:
         self._hash = hash(frozenset(self._dict.items()))
      return self._hash

   def __iter__(self):
      return iter(self._dict)

   def __len__(self):
      return len(self._dict)

   def __repr__(self):
      return 'FrozenMapping({!r})'.format(self._dict)

##############################################################################################################

class TagRegistry(object):
   """Associates tags to constructors.

   A constructor is a callable invoked as constructor(resolver, value), where resolver is the
   canonyaml.resolver.Resolver instance and value is the text of a scalar, the list of resolved items of a
   sequence, or the list of resolved (key, value) pairs of a mapping; composite keys will have been frozen into
   hashable objects. Constructors can report errors by calling resolver.raise_resolution_error().

   Registries can be chained: a registry created with a parent consults itself first, then the parent; this
   allows extending default_registry without modifying it.
   """

   def __init__(self, parent=None):
      """Constructor.

      canonyaml.resolver.TagRegistry parent
         Registry to fall back to for tags not registered in this one.
      """

      self._parent = parent
      self._tags = {}

   def __contains__(self, tag):
      return self.lookup(self.expand_shorthand(tag)) is not None

   @staticmethod
   def expand_shorthand(tag):
      """Expands the “!!” shorthand into the YAML tag prefix.

      str tag
         Tag, possibly starting with “!!”.
      str return
         Expanded tag.
      """

      if tag.startswith('!!'):
         return YAML_TAG_PREFIX + tag[2:]
      return tag

   def lookup(self, tag):
      """Returns the kind and constructor registered for a tag.

      str tag
         Fully-expanded tag.
      tuple(canonyaml.Kind, callable) return
         Kind of node the tag applies to, and its constructor; None if the tag is not registered.
      """

      entry = self._tags.get(tag)
      if entry is None and self._parent:
         entry = self._parent.lookup(tag)
      return entry

   def register(self, tag, kind, constructor):
      """Registers a new tag.

      str tag
         Tag, possibly in “!!” shorthand form.
      canonyaml.Kind kind
         Kind of node the tag applies to.
      callable constructor
         Constructor for the tag; see the class documentation.
      """

      tag = self.expand_shorthand(tag)
      if tag in self._tags:
         raise canonyaml.DuplicateTagError('tag “{}” already registered'.format(tag))
      self._tags[tag] = (kind, constructor)

   def tag(self, tag, kind):
      """Decorator to register a constructor for a tag.

      str tag
         Tag, possibly in “!!” shorthand form.
      canonyaml.Kind kind
         Kind of node the tag applies to.
      """

      def decorate(constructor):
         self.register(tag, kind, constructor)
         return constructor

      return decorate

##############################################################################################################

class Resolver(object):
   """Converts a node tree into Python objects.

   Untagged plain scalars are resolved implicitly by matching them against the patterns selected by the
   SCALAR_* bits; quoted and block scalars always resolve to str. Tagged nodes are handed to the constructor
   registered for the tag. A node that appears multiple times in the tree (through aliases) resolves to a
   single object.
   """

   def __init__(self, registry=None, implicit_types=SCALAR_ALL, strict_tags=False, logger=None):
      """Constructor.

      canonyaml.resolver.TagRegistry registry
         Tags to use; defaults to canonyaml.resolver.default_registry.
      int implicit_types
         One or more SCALAR_* constants, selecting the types untagged plain scalars can resolve to.
      bool strict_tags
         If True, tags without a registered constructor will raise canonyaml.UnsupportedTagError; if False,
         they will resolve to canonyaml.resolver.TaggedValue instances.
      canonyaml.logging.Logger logger
         Logger to report tag fallbacks to.
      """

      if registry is None:
         registry = default_registry
      if logger is None:
         logger = canonyaml.logging.Logger(canonyaml.logging.LogGenerator())
      self._registry = registry
      self._implicit_types = implicit_types
      self._strict_tags = strict_tags
      self._log = logger
      # Position of the node being constructed.
      self._mark = None
      # Node being constructed.
      self._node = None
      # Already-resolved values, by node id.
      self._values = {}

   def construct_scalar(self, applicable_scalar_types, tag, text):
      """Constructs a scalar by finding a matching pattern in _scalar_tag_conversions and applying the
      corresponding conversion.

      int applicable_scalar_types
         One or more SCALAR_* constants, activating the matching elements in _scalar_tag_conversions.
      str tag
         Tag being constructed; if no patterns apply, the scalar falls back to str and the fallback is logged.
         If None, the scalar is returned as-is without logging.
      str text
         Scalar to be converted.
      object return
         Converted scalar.
      """

      for scalar_type, matcher, convertor in _scalar_tag_conversions:
         if (scalar_type & applicable_scalar_types) == scalar_type:
            match = matcher.match(text)
            if match:
               if not callable(convertor):
                  return convertor
               try:
                  return convertor(**match.groupdict())
               except ValueError:
                  # Well-formed but out of range, e.g. “2001-02-30”, or an integer with too many digits.
                  break
      if tag:
         self._log(self._log.MEDIUM, '{}: “{}” is not a valid {}; keeping it as a string', self._mark, text, tag)
      return text

   def raise_resolution_error(self, message):
      """Raises a canonyaml.StructuralError referencing the node being constructed.

      str message
         Error message.
      """

      raise canonyaml.StructuralError(message, self._mark)

   def resolve(self, node):
      """Resolves a node tree.

      canonyaml.nodes.Node node
         Root of the tree.
      object return
         Resolved value.
      """

      self._values = {}
      try:
         return self._resolve_node(node)
      finally:
         self._values = {}

   def _construct_tagged(self, node, value):
      """Applies the constructor registered for the node’s tag.

      canonyaml.nodes.Node node
         Tagged node.
      object value
         Untagged value of the node: str, list of items, or list of (key, value) pairs.
      object return
         Constructed value.
      """

      entry = self._registry.lookup(node.tag)
      if entry is None:
         if self._strict_tags:
            raise canonyaml.UnsupportedTagError('unsupported tag “{}”'.format(node.tag), node.start_mark)
         self._log(self._log.MEDIUM, '{}: no constructor for tag “{}”', node.start_mark, node.tag)
         if node.kind is canonyaml.Kind.MAPPING:
            value = dict(value)
         return TaggedValue(node.tag, value)
      kind, constructor = entry
      if kind is not node.kind:
         raise canonyaml.TagKindMismatchError(
            'tag “{}” cannot be applied to a {}'.format(node.tag, node.kind), node.start_mark
         )
      self._mark = node.start_mark
      self._node = node
      return constructor(self, value)

   def _get_node(self):
      return self._node

   node = property(_get_node, doc="""
      Node being constructed. Allows constructors to inspect the source of their value, e.g. the pairs of a
      mapping before duplicate keys are merged.
   """)

   def _freeze(self, value, mark):
      """Returns a hashable equivalent of a value, so that it can be used as a mapping or set key.

      object value
         Value to freeze.
      canonyaml.Mark mark
         Position of the key, for error reporting.
      object return
         Hashable value.
      """

      if isinstance(value, list):
         return tuple(self._freeze(item, mark) for item in value)
      elif isinstance(value, dict):
         return FrozenMapping((key, self._freeze(item, mark)) for key, item in value.items())
      elif isinstance(value, (set, frozenset)):
         return frozenset(value)
      elif isinstance(value, TaggedValue):
         return TaggedValue(value.tag, self._freeze(value.value, mark))
      try:
         hash(value)
      except TypeError:
         raise canonyaml.StructuralError('unhashable mapping key: {!r}'.format(value), mark)
      return value

   def _resolve_node(self, node):
      """Resolves a node, reusing the result if the node was already resolved.

      canonyaml.nodes.Node node
         Node to resolve.
      object return
         Resolved value.
      """

      node_id = id(node)
      if node_id in self._values:
         return self._values[node_id]
      if node.kind is canonyaml.Kind.SCALAR:
         value = self._resolve_scalar(node)
      elif node.kind is canonyaml.Kind.SEQUENCE:
         items = [self._resolve_node(item) for item in node.items]
         if node.tag is None or node.tag == '!':
            value = items
         else:
            value = self._construct_tagged(node, items)
      else:
         pairs = []
         for key, item in node.pairs:
            pairs.append((self._freeze(self._resolve_node(key), key.start_mark), self._resolve_node(item)))
         if node.tag is None or node.tag == '!':
            # Later duplicate keys override earlier ones.
            value = dict(pairs)
         else:
            value = self._construct_tagged(node, pairs)
      self._values[node_id] = value
      return value

   def _resolve_scalar(self, node):
      """Resolves a scalar node.

      canonyaml.nodes.ScalarNode node
         Node to resolve.
      object return
         Resolved value.
      """

      if node.tag is None:
         if node.style is ScalarStyle.PLAIN:
            return self.construct_scalar(self._implicit_types, None, node.value)
         # Quoted and block scalars are always strings.
         return node.value
      elif node.tag == '!':
         return node.value
      else:
         return self._construct_tagged(node, node.value)

##############################################################################################################

# Registry of the tags supported out of the box. Can be extended by the application before decoding.
default_registry = TagRegistry()

def tag(tag, kind):
   """Decorator to register a constructor for a tag in the default registry.

   str tag
      Tag, possibly in “!!” shorthand form.
   canonyaml.Kind kind
      Kind of node the tag applies to.
   """

   return default_registry.tag(tag, kind)

@tag('!!binary', canonyaml.Kind.SCALAR)
def _construct_binary(resolver, text):
   try:
      return base64.b64decode(''.join(text.split()), validate=True)
   except (binascii.Error, ValueError):
      resolver._log(resolver._log.MEDIUM, '{}: invalid base64 data; keeping it as a string', resolver._mark)
      return text

@tag('!!map', canonyaml.Kind.MAPPING)
def _construct_map(resolver, pairs):
   return dict(pairs)

def _single_pairs(resolver, tag, items):
   """Returns the only pair of each entry of a !!omap or !!pairs sequence.

   canonyaml.resolver.Resolver resolver
      Resolver constructing the sequence.
   str tag
      Tag being constructed, for error messages.
   list(object) items
      Resolved entries of the sequence.
   list(tuple(object, object)) return
      Key and value of each entry.
   """

   ret = []
   for item_node, item in zip(resolver.node.items, items):
      # Check the node, since the resolved dict has already merged duplicate keys.
      if (
         item_node.kind is not canonyaml.Kind.MAPPING or len(item_node.pairs) != 1 or
         not isinstance(item, dict)
      ):
         resolver.raise_resolution_error('{} entries must be single-pair mappings, found {!r}'.format(tag, item))
      ret.append(next(iter(item.items())))
   return ret

@tag('!!omap', canonyaml.Kind.SEQUENCE)
def _construct_omap(resolver, items):
   ret = collections.OrderedDict()
   for key, value in _single_pairs(resolver, '!!omap', items):
      if key in ret:
         resolver.raise_resolution_error('duplicate key in !!omap: {!r}'.format(key))
      ret[key] = value
   return ret

@tag('!!pairs', canonyaml.Kind.SEQUENCE)
def _construct_pairs(resolver, items):
   return _single_pairs(resolver, '!!pairs', items)

@tag('!!seq', canonyaml.Kind.SEQUENCE)
def _construct_seq(resolver, items):
   return list(items)

@tag('!!set', canonyaml.Kind.MAPPING)
def _construct_set(resolver, pairs):
   ret = set()
   for key, value in pairs:
      if value is not None:
         resolver.raise_resolution_error('!!set values must be null, found {!r} for key {!r}'.format(value, key))
      if key in ret:
         resolver.raise_resolution_error('duplicate key in !!set: {!r}'.format(key))
      ret.add(key)
   return ret

@tag('!!str', canonyaml.Kind.SCALAR)
def _construct_str(resolver, text):
   return text

default_registry.register('!!bool', canonyaml.Kind.SCALAR,
   lambda resolver, text: resolver.construct_scalar(SCALAR_BOOL, '!!bool', text))
default_registry.register('!!float', canonyaml.Kind.SCALAR,
   lambda resolver, text: resolver.construct_scalar(SCALAR_FLOAT | SCALAR_INF_NAN, '!!float', text))
default_registry.register('!!int', canonyaml.Kind.SCALAR,
   lambda resolver, text: resolver.construct_scalar(SCALAR_INT | SCALAR_OCTAL, '!!int', text))
default_registry.register('!!null', canonyaml.Kind.SCALAR,
   lambda resolver, text: resolver.construct_scalar(SCALAR_NULL, '!!null', text))
default_registry.register('!!timestamp', canonyaml.Kind.SCALAR,
   lambda resolver, text: resolver.construct_scalar(SCALAR_TIMESTAMP, '!!timestamp', text))
