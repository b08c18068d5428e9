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

"""Canonyaml command line argument parsing."""

import argparse

from canonyaml.stream import ErrorPolicy


##############################################################################################################

class Command(object):
   """Sub-command selected on the command line."""

   _instances = {}

   def __init__(self, name):
      self._name = name
      self._instances[name] = self

   def __repr__(self):
      return self._name

   def __str__(self):
      return self._name

   @classmethod
   def from_str(cls, name):
      return cls._instances.get(name, name)

Command.DECODE = Command('decode')
Command.PARSE  = Command('parse')
Command.SCAN   = Command('scan')

##############################################################################################################

class Parser(object):
   """Parses Canonyaml’s command line."""

   _parser = None

   def __init__(self):
      """Constructor."""

      self._parser = argparse.ArgumentParser(prog='canonyaml', add_help=False)

      # Flags that apply to all commands.
      self._parser.add_argument(
         '--help', action='help',
         help='Show this informative message and exit.'
      )
      self._parser.add_argument(
         '--core-only', action='store_true',
         help='Only resolve untagged scalars using the YAML core schema, without octal integers (0o14) and ' +
              'infinity/NaN floats (.inf, .nan).'
      )
      self._parser.add_argument(
         '--on-error', metavar='{skip,stop}', type=ErrorPolicy.from_str,
         choices=(ErrorPolicy.SKIP, ErrorPolicy.STOP), default=ErrorPolicy.STOP,
         help='What to do when a document cannot be decoded: “stop” (default) ends with an error, “skip” ' +
              'reports the error and moves on to the next document.'
      )
      self._parser.add_argument(
         '--strict-tags', action='store_true',
         help='Fail on tags without a constructor, instead of keeping their value as-is.'
      )
      self._parser.add_argument(
         '--summary', action='store_true',
         help='Print a summary of the documents decoded and failed at the end.'
      )
      self._parser.add_argument(
         '-v', '--verbose', action='count', default=0,
         help='Increase verbosity level; can be specified multiple times.'
      )

      subparsers = self._parser.add_subparsers(dest='command')
      subparsers.type = Command.from_str
      subparsers.required = True

      for command, description in (
         (Command.DECODE, 'Decode each document and print the resulting Python object.'),
         (Command.PARSE,  'Parse each document and print its node tree, without resolving it.'),
         (Command.SCAN,   'Print the tokens in the source.'),
      ):
         subparser = subparsers.add_parser(command, help=description)
         subparser.add_argument(
            'file', metavar='FILE', nargs='?', default=None,
            help='YAML file to read. If omitted, the standard input will be read.'
         )

   def parse_args(self, *args, **kwargs):
      """See argparse.ArgumentParser.parse_args()."""

      return self._parser.parse_args(*args, **kwargs)
