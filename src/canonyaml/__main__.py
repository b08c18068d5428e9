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

"""Decodes a YAML file and prints the result."""

import io
import pprint
import sys

import canonyaml
import canonyaml.argparser
import canonyaml.logging
import canonyaml.resolver
import canonyaml.scanner
import canonyaml.stream


##############################################################################################################

def _run_command(args, decoder, source, source_name, stdout):
   """Executes the selected command on an open source.

   argparse.Namespace args
      Parsed command-line arguments.
   canonyaml.stream.Decoder decoder
      Configured decoder.
   io.TextIOBase source
      YAML source.
   str source_name
      Name of the source.
   io.TextIOBase stdout
      Stream to print results to.
   """

   if args.command is canonyaml.argparser.Command.DECODE:
      for i, value in enumerate(decoder.decode_stream(source, source_name)):
         if i > 0:
            stdout.write('---\n')
         stdout.write(pprint.pformat(value) + '\n')
   elif args.command is canonyaml.argparser.Command.PARSE:
      for document in decoder.documents(source, source_name):
         stdout.write('{!r}\n'.format(document))
   elif args.command is canonyaml.argparser.Command.SCAN:
      for token in canonyaml.scanner.Scanner(source.read(), source_name).tokens():
         stdout.write('{}: {!r}\n'.format(token.start_mark, token))

def main(args, stdin=None, stdout=None, stderr=None):
   """Implementation of __main__.

   iterable(str*) args
      Command-line arguments, starting with the program name.
   io.TextIOBase stdin
      Standard input; defaults to sys.stdin.
   io.TextIOBase stdout
      Standard output; defaults to sys.stdout.
   io.TextIOBase stderr
      Standard error, also used for logging; defaults to sys.stderr.
   int return
      Command return status.
   """

   stdin = stdin or sys.stdin
   stdout = stdout or sys.stdout
   stderr = stderr or sys.stderr

   args = canonyaml.argparser.Parser().parse_args(args[1:])

   log = canonyaml.logging.Logger(canonyaml.logging.LogGenerator(stderr))
   log.verbosity += args.verbose
   if args.core_only:
      implicit_types = canonyaml.resolver.SCALAR_CORE
   else:
      implicit_types = canonyaml.resolver.SCALAR_ALL
   decoder = canonyaml.stream.Decoder(
      on_error=args.on_error, strict_tags=args.strict_tags, implicit_types=implicit_types, logger=log
   )

   try:
      if args.file:
         try:
            source = io.open(args.file, 'rt', encoding='utf-8-sig', newline='')
         except OSError as x:
            stderr.write('error: could not open {}: {}\n'.format(args.file, x.strerror))
            return 1
         with source:
            _run_command(args, decoder, source, args.file, stdout)
      else:
         _run_command(args, decoder, stdin, '<stdin>', stdout)
   except canonyaml.DecodeError as x:
      stderr.write('error: {}\n'.format(x))
      return 1
   finally:
      if args.summary:
         log.summary()
   return 0

def run():
   """Entry point for the canonyaml console script."""

   return main(sys.argv)

if __name__ == '__main__':
   sys.exit(main(sys.argv))
