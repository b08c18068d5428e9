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

"""YAML decoder.

The decoding pipeline is split in one module per stage: canonyaml.scanner turns text into tokens,
canonyaml.parser builds nodes out of them, canonyaml.resolver converts nodes into Python objects, and
canonyaml.stream drives the three over each document of a stream.

To run the test suite:
  (cd src && python -m unittest discover canonyaml '*_test.py')

To temporarily disable unit tests:
  @unittest.skip
"""

import datetime


##############################################################################################################

class Mark(object):
   """Position in a YAML source."""

   # Column, 0-based.
   column = None
   # Line, 0-based.
   line = None
   # Name of the source, e.g. the path to the file.
   source_name = None

   def __init__(self, source_name, line, column):
      """Constructor.

      str source_name
         Name of the source.
      int line
         0-based line number.
      int column
         0-based column number.
      """

      self.source_name = source_name
      self.line = line
      self.column = column

   def __eq__(self, other):
      return (
         isinstance(other, Mark) and
         self.source_name == other.source_name and self.line == other.line and self.column == other.column
      )

   def __ne__(self, other):
      return not self.__eq__(other)

   def __hash__(self):
      return hash((self.source_name, self.line, self.column))

   def __repr__(self):
      return 'Mark({!r}, {}, {})'.format(self.source_name, self.line, self.column)

   def __str__(self):
      return '{}:{}:{}'.format(self.source_name, self.line + 1, self.column + 1)

##############################################################################################################

class DecodeError(Exception):
   """Base class for all the errors raised while decoding a YAML source."""

   # Position at which the error was detected, or None if unknown.
   mark = None
   # Error message, without position information.
   message = None

   def __init__(self, message, mark=None):
      """Constructor.

      str message
         Description of the error.
      canonyaml.Mark mark
         Position at which the error was detected, if known.
      """

      if mark is None:
         Exception.__init__(self, message)
      else:
         Exception.__init__(self, '{}: {}'.format(mark, message))
      self.mark = mark
      self.message = message

##############################################################################################################

class LexicalError(DecodeError):
   """Raised when the source contains a malformed token: bad escape sequence, unterminated quote or flow
   collection, tab character in indentation, and so on.
   """

   pass

##############################################################################################################

class StructuralError(DecodeError):
   """Indicates that tokens don’t fit together: indentation or bracket mismatch, reference to an undefined
   anchor, malformed !!set or !!omap, and so on.
   """

   pass

##############################################################################################################

class TagKindMismatchError(StructuralError):
   """Raised when a tag is applied to a YAML object of a kind not suitable to construct the tag."""

   pass

##############################################################################################################

class UnsupportedTagError(DecodeError):
   """Raised for explicit tags that have no registered constructor, but only if strict tag handling was
   requested.
   """

   pass

##############################################################################################################

class DuplicateTagError(Exception):
   """Raised when attempting to register a tag with a name that’s already taken."""

   pass

##############################################################################################################

class Kind(object):
   """YAML raw object type."""

   MAPPING  = None
   SCALAR   = None
   SEQUENCE = None

   _name = None

   def __init__(self, name):
      """Constructor.

      str name
         Name of the kind.
      """

      self._name = name

   def __repr__(self):
      return 'Kind.{}'.format(self._name.upper())

   def __str__(self):
      return self._name

Kind.MAPPING  = Kind('mapping')
Kind.SCALAR   = Kind('scalar')
Kind.SEQUENCE = Kind('sequence')

##############################################################################################################

class TimestampTZInfo(datetime.tzinfo):
   """Provides a tzinfo for datatime.datetime instances constructed from YAML timestamps that included a time
   zone.
   """

   _td = None
   _tz = None

   def __init__(self, tz, hour, minute):
      """Constructor.

      str tz
         The timezone, as a string; can be “Z” to indicate UTC.
      int hour
         Timezone hour part.
      int minute
         Timezone minute part; must have the same sign as hour.
      """

      self._td = datetime.timedelta(hours=hour, minutes=minute)
      self._tz = tz

   def __eq__(self, other):
      return isinstance(other, TimestampTZInfo) and self._td == other._td

   def __ne__(self, other):
      return not self.__eq__(other)

   def __hash__(self):
      return hash(self._td)

   def __repr__(self):
      return 'TimestampTZInfo({!r}, {!r})'.format(self._tz, self._td)

   def dst(self, dt):
      """See datetime.tzinfo.dst()."""

      return None

   def tzname(self, dt):
      """See datetime.tzinfo.tzname()."""

      return self._tz

   def utcoffset(self, dt):
      """See datetime.tzinfo.utcoffset()."""

      return self._td

# Shared instance for UTC timestamps.
UTC = TimestampTZInfo('UTC', 0, 0)
