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

"""YAML document stream decoding."""

import io
import re

import canonyaml
import canonyaml.logging
import canonyaml.parser
import canonyaml.resolver
import canonyaml.scanner


##############################################################################################################

def decode_file(file_path):
   """Loads and decodes a YAML file.

   str file_path
      Path to the YAML file.
   list(object) return
      Python object corresponding to each document in the file.
   """

   return Decoder().decode_file(file_path)

def decode_stream(source, source_name='<string>'):
   """Decodes a YAML stream, one document at a time.

   object source
      YAML source: str, bytes, or iterable of str.
   str source_name
      Name of the source for use in diagnostic messages.
   object yield
      Python object corresponding to each document in the stream.
   """

   return Decoder().decode_stream(source, source_name)

def decode_string(s):
   """Decodes a string containing a single YAML document.

   str s
      YAML source.
   object return
      Python object corresponding to the contents of the string.
   """

   return Decoder().decode_string(s)

##############################################################################################################

class ErrorPolicy(object):
   """What to do when a document cannot be decoded."""

   # Skip the document, log the error, and continue with the next document.
   SKIP = None
   # Raise the error, ending the stream.
   STOP = None

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

ErrorPolicy.SKIP = ErrorPolicy('skip')
ErrorPolicy.STOP = ErrorPolicy('stop')

##############################################################################################################

# Matches a line break; the capture makes re.split() return the line breaks as well.
_line_break_re = re.compile('(\r\n|[\r\n\x85\u2028\u2029])')
# Matches a document start line.
_doc_start_re = re.compile(r'^---(?:[ \t\r\n\x85\u2028\u2029]|$)')
# Matches a document end line.
_doc_end_re = re.compile(r'^\.\.\.(?:[ \t\r\n\x85\u2028\u2029]|$)')

def _split_lines(text):
   """Splits text into lines, using the same line breaks as the scanner.

   str text
      Text to split.
   str yield
      Line, including its line break if it had one.
   """

   parts = _line_break_re.split(text)
   for i in range(0, len(parts) - 1, 2):
      yield parts[i] + parts[i + 1]
   if parts[-1]:
      yield parts[-1]

def iter_lines(source):
   """Returns the lines of a YAML source.

   object source
      YAML source: str, bytes (UTF-8, optionally with a byte order mark), or iterable of str or bytes chunks.
      Chunks don’t need to be aligned to lines.
   str yield
      Line, including its line break if it had one.
   """

   if isinstance(source, bytes):
      source = source.decode('utf-8-sig')
   if isinstance(source, str):
      for line in _split_lines(source):
         yield line
      return

   pending = ''
   for chunk in source:
      if isinstance(chunk, bytes):
         chunk = chunk.decode('utf-8')
      lines = list(_split_lines(pending + chunk))
      # The last line may continue in the next chunk; so may a “\r”, if followed by “\n”.
      if lines and lines[-1][-1] not in '\n\x85\u2028\u2029':
         pending = lines.pop()
      else:
         pending = ''
      for line in lines:
         yield line
   if pending:
      yield pending

def split_documents(lines):
   """Groups the lines of a YAML stream into documents.

   A “---” line starts a new document, unless the current document only consists of comments, blank lines
   and directives; a “...” line ends the current document. Lines that don’t belong to any document (e.g.
   comments after a “...”) are dropped.

   iterable(str) lines
      Lines of the stream, as returned by iter_lines().
   tuple(int, str) yield
      0-based line number of the first line of the document, and text of the document.
   """

   chunk = []
   first_line = 0
   has_start = False
   has_content = False
   has_directives = False
   for line_no, line in enumerate(lines):
      if _doc_start_re.match(line):
         if has_start or has_content:
            yield first_line, ''.join(chunk)
            chunk = []
            first_line = line_no
            has_content = False
            has_directives = False
         chunk.append(line)
         has_start = True
      elif _doc_end_re.match(line):
         chunk.append(line)
         if has_start or has_content or has_directives:
            yield first_line, ''.join(chunk)
         chunk = []
         first_line = line_no + 1
         has_start = False
         has_content = False
         has_directives = False
      else:
         chunk.append(line)
         stripped = line.strip()
         if line.startswith('%'):
            has_directives = True
         elif stripped and not stripped.startswith('#'):
            has_content = True
   if has_start or has_content or has_directives:
      yield first_line, ''.join(chunk)

##############################################################################################################

class Decoder(object):
   """Decodes YAML streams into Python objects.

   Each document in a stream is scanned, parsed and resolved independently of the others, so an error in a
   document does not affect the documents preceding it; depending on the error policy, it can also be
   skipped to continue with the next document.
   """

   def __init__(
      self, registry=None, on_error=ErrorPolicy.STOP, strict_tags=False,
      implicit_types=canonyaml.resolver.SCALAR_ALL, logger=None
   ):
      """Constructor.

      canonyaml.resolver.TagRegistry registry
         Tags to use; defaults to canonyaml.resolver.default_registry.
      canonyaml.stream.ErrorPolicy on_error
         What to do with documents that cannot be decoded.
      bool strict_tags
         If True, tags without a registered constructor will raise canonyaml.UnsupportedTagError.
      int implicit_types
         One or more canonyaml.resolver.SCALAR_* constants, selecting the types untagged plain scalars can
         resolve to.
      canonyaml.logging.Logger logger
         Logger to use; if omitted, a new one writing to stderr will be created.
      """

      if logger is None:
         logger = canonyaml.logging.Logger(canonyaml.logging.LogGenerator())
      self._log = logger
      self._on_error = on_error
      self._resolver = canonyaml.resolver.Resolver(registry, implicit_types, strict_tags, logger)

   def decode_file(self, file_path):
      """Loads and decodes a YAML file.

      str file_path
         Path to the YAML file.
      list(object) return
         Python object corresponding to each document in the file.
      """

      with io.open(file_path, 'rt', encoding='utf-8-sig', newline='') as f:
         return list(self.decode_stream(f, file_path))

   def decode_stream(self, source, source_name='<string>'):
      """Decodes a YAML stream, one document at a time.

      object source
         YAML source: str, bytes, or iterable of str.
      str source_name
         Name of the source for use in diagnostic messages.
      object yield
         Python object corresponding to each document in the stream.
      """

      for document, value in self._process(source, source_name, True):
         yield value

   def decode_string(self, s, source_name='<string>'):
      """Decodes a string containing a single YAML document.

      str s
         YAML source.
      str source_name
         Name of the source for use in diagnostic messages.
      object return
         Python object corresponding to the document, or None if the string contains no documents.
      """

      values = self._process(source=s, source_name=source_name, resolve=True)
      ret = None
      for i, (document, value) in enumerate(values):
         if i > 0:
            raise canonyaml.StructuralError('expected a single document', document.start_mark)
         ret = value
      return ret

   def documents(self, source, source_name='<string>'):
      """Parses a YAML stream without resolving its documents.

      object source
         YAML source: str, bytes, or iterable of str.
      str source_name
         Name of the source for use in diagnostic messages.
      canonyaml.parser.Document yield
         Parsed document.
      """

      for document, value in self._process(source, source_name, False):
         yield document

   def _parse_chunk(self, text, source_name, first_line):
      """Scans and parses the text of a document.

      str text
         Document text, as returned by split_documents().
      str source_name
         Name of the source.
      int first_line
         Line number of the first line of text in the source.
      list(canonyaml.parser.Document) return
         Parsed documents; normally just one.
      """

      tokens = canonyaml.scanner.Scanner(text, source_name, first_line).tokens()
      parser = canonyaml.parser.Parser(self._trace_tokens(tokens), source_name, self._log)
      return list(parser.documents())

   def _process(self, source, source_name, resolve):
      """Drives scanner, parser and resolver over each document in a stream, applying the error policy.

      object source
         YAML source: str, bytes, or iterable of str.
      str source_name
         Name of the source.
      bool resolve
         If True, documents will be resolved; if False, they will only be parsed.
      tuple(canonyaml.parser.Document, object) yield
         Document and its resolved value (None if resolve is False).
      """

      log = self._log
      for first_line, text in split_documents(iter_lines(source)):
         try:
            results = []
            for document in self._parse_chunk(text, source_name, first_line):
               if resolve:
                  value = self._resolver.resolve(document.root)
               else:
                  value = None
               results.append((document, value))
         except canonyaml.DecodeError as x:
            log.add_document_result(True)
            if self._on_error is ErrorPolicy.STOP:
               raise
            log(log.QUIET, 'skipping document at {}:{}: {}', source_name, first_line + 1, x)
            continue
         for document, value in results:
            log.add_document_result(False)
            log(log.LOW, '{}: document decoded', document.start_mark)
            yield document, value

   def _trace_tokens(self, tokens):
      """Logs each token as it is consumed.

      iterable(canonyaml.scanner.Token) tokens
         Tokens to trace.
      canonyaml.scanner.Token yield
         Same tokens.
      """

      log = self._log
      for token in tokens:
         log(log.HIGH, '{}: {!r}', token.start_mark, token)
         yield token
