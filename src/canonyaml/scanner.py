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

"""YAML scanner."""

import re
import urllib.parse

import canonyaml


##############################################################################################################

def scan(text, source_name='<string>'):
   """Scans a string containing YAML.

   str text
      YAML source.
   str source_name
      Name of the source for use in diagnostic messages.
   canonyaml.scanner.Token yield
      Scanned token.
   """

   return Scanner(text, source_name).tokens()

##############################################################################################################

class TokenKind(object):
   """Lexical token type."""

   ALIAS           = None
   ANCHOR          = None
   BLOCK_MAP_KEY   = None
   BLOCK_MAP_VALUE = None
   BLOCK_SEQ_ITEM  = None
   DEDENT          = None
   DIRECTIVE       = None
   DOC_END         = None
   DOC_START       = None
   FLOW_ENTRY      = None
   FLOW_MAP_END    = None
   FLOW_MAP_START  = None
   FLOW_SEQ_END    = None
   FLOW_SEQ_START  = None
   INDENT          = None
   SCALAR          = None
   STREAM_END      = None
   TAG             = None

   _name = None

   def __init__(self, name):
      """Constructor.

      str name
         Name of the token kind.
      """

      self._name = name

   def __repr__(self):
      return self._name

   def __str__(self):
      return self._name

TokenKind.ALIAS           = TokenKind('alias')
TokenKind.ANCHOR          = TokenKind('anchor')
TokenKind.BLOCK_MAP_KEY   = TokenKind('key')
TokenKind.BLOCK_MAP_VALUE = TokenKind('value')
TokenKind.BLOCK_SEQ_ITEM  = TokenKind('sequence entry')
TokenKind.DEDENT          = TokenKind('dedent')
TokenKind.DIRECTIVE       = TokenKind('directive')
TokenKind.DOC_END         = TokenKind('document end')
TokenKind.DOC_START       = TokenKind('document start')
TokenKind.FLOW_ENTRY      = TokenKind('“,”')
TokenKind.FLOW_MAP_END    = TokenKind('“}”')
TokenKind.FLOW_MAP_START  = TokenKind('“{”')
TokenKind.FLOW_SEQ_END    = TokenKind('“]”')
TokenKind.FLOW_SEQ_START  = TokenKind('“[”')
TokenKind.INDENT          = TokenKind('indent')
TokenKind.SCALAR          = TokenKind('scalar')
TokenKind.STREAM_END      = TokenKind('end of stream')
TokenKind.TAG             = TokenKind('tag')

##############################################################################################################

class ScalarStyle(object):
   """Presentation style of a scalar."""

   DOUBLE_QUOTED = None
   FOLDED        = None
   LITERAL       = None
   PLAIN         = None
   SINGLE_QUOTED = None

   _name = None

   def __init__(self, name):
      """Constructor.

      str name
         Name of the style.
      """

      self._name = name

   def __repr__(self):
      return self._name

   def __str__(self):
      return self._name

ScalarStyle.DOUBLE_QUOTED = ScalarStyle('double-quoted')
ScalarStyle.FOLDED        = ScalarStyle('folded')
ScalarStyle.LITERAL       = ScalarStyle('literal')
ScalarStyle.PLAIN         = ScalarStyle('plain')
ScalarStyle.SINGLE_QUOTED = ScalarStyle('single-quoted')

##############################################################################################################

class Token(object):
   """Lexical token. Not modified after being yielded by the scanner."""

   # Position of the character following the token.
   end_mark = None
   # Kind of token (canonyaml.scanner.TokenKind.*).
   kind = None
   # Position of the first character of the token.
   start_mark = None
   # Only for SCALAR tokens: presentation style (canonyaml.scanner.ScalarStyle.*).
   style = None
   # Payload: text for SCALAR, name for ALIAS and ANCHOR, (handle, suffix) for TAG, (name, parameters) for
   # DIRECTIVE; None for all other kinds.
   value = None

   def __init__(self, kind, value, start_mark, end_mark, style=None):
      """Constructor.

      canonyaml.scanner.TokenKind kind
         Kind of token.
      object value
         Payload.
      canonyaml.Mark start_mark
         Start of the token.
      canonyaml.Mark end_mark
         End of the token.
      canonyaml.scanner.ScalarStyle style
         Scalar presentation style.
      """

      self.kind = kind
      self.value = value
      self.start_mark = start_mark
      self.end_mark = end_mark
      self.style = style

   def __repr__(self):
      if self.style:
         return 'Token({}, {!r}, {})'.format(self.kind, self.value, self.style)
      elif self.value is not None:
         return 'Token({}, {!r})'.format(self.kind, self.value)
      else:
         return 'Token({})'.format(self.kind)

##############################################################################################################

class _SimpleKey(object):
   """Position of a token that could turn out to be a single-line mapping key."""

   def __init__(self, token_number, required, index, line, mark):
      self.token_number = token_number
      self.required = required
      self.index = index
      self.line = line
      self.mark = mark

##############################################################################################################

class Scanner(object):
   """YAML scanner. Converts YAML source into a lazy sequence of tokens.

   Block structure is made explicit by INDENT and DEDENT tokens, emitted whenever a block collection opens at a
   column deeper than the current one, or a token appears at a column shallower than an open collection.
   Mapping keys that appear on the same line as their “:” (“simple keys”) can only be recognized once the “:”
   is found; for this reason the scanner remembers the position of the last token that could start a key, and
   retroactively inserts BLOCK_MAP_KEY (and INDENT, if needed) before it when a “:” shows up. Tokens are only
   released once no such insertion can happen ahead of them.
   """

   # Characters that terminate a line.
   _breaks = '\r\n\x85\u2028\u2029'
   # Characters that separate tokens; “\0” stands for the end of the source.
   _blank_or_end = '\0 \t\r\n\x85\u2028\u2029'
   # Escape codes for double-quoted scalars, followed by the number of hexadecimal digits.
   _escape_codes = {
      'x': 2,
      'u': 4,
      'U': 8,
   }
   # Single-character escapes for double-quoted scalars.
   _escape_replacements = {
      '0' : '\0',
      'a' : '\x07',
      'b' : '\x08',
      't' : '\x09',
      '\t': '\x09',
      'n' : '\x0a',
      'v' : '\x0b',
      'f' : '\x0c',
      'r' : '\x0d',
      'e' : '\x1b',
      ' ' : ' ',
      '"' : '"',
      '/' : '/',
      '\\': '\\',
      'N' : '\x85',
      '_' : '\xa0',
      'L' : '\u2028',
      'P' : '\u2029',
   }
   # Matches an anchor or alias name.
   _anchor_name_re = re.compile(r'[^\0 \t\r\n\x85\u2028\u2029,\[\]{}]+')
   # Matches a tag handle: “!”, “!!” or “!name!”.
   _tag_handle_re = re.compile(r'!(?:[-0-9A-Za-z]*!)?')
   # Matches a tag URI in block context, or in a verbatim tag.
   _tag_uri_re = re.compile(r'''(?:[-;/?:@&=+$,_.!~*'()\[\]#0-9A-Za-z]|%[0-9A-Fa-f]{2})*''')
   # Matches a tag URI in flow context, where flow indicators terminate it.
   _flow_tag_uri_re = re.compile(r'''(?:[-;/?:@&=+$_.!~*'()#0-9A-Za-z]|%[0-9A-Fa-f]{2})*''')
   # Matches a valid “%TAG” handle.
   _tag_directive_handle_re = re.compile(r'^!(?:[-0-9A-Za-z]*!)?$')
   # Matches a valid “%YAML” version.
   _yaml_directive_version_re = re.compile(r'^\d+\.\d+$')

   def __init__(self, text, source_name='<string>', first_line=0):
      """Constructor.

      str text
         YAML source.
      str source_name
         Name of the source for use in diagnostic messages.
      int first_line
         0-based line number of the first line of text in the source; used when text is only a portion of a
         larger source.
      """

      self._text = text
      self._source_name = source_name
      self._first_line = first_line
      self._index = 0
      self._line = 0
      self._column = 0
      self._done = False
      # Tokens scanned but not yet yielded.
      self._tokens = []
      self._tokens_taken = 0
      # Current indentation column; -1 means no block collection is open.
      self._indent = -1
      self._indents = []
      # Count of open “[” and “{”, with the position of each.
      self._flow_level = 0
      self._flow_start_marks = []
      # True if the next token may start a simple key.
      self._allow_simple_key = True
      # Candidate simple key for each flow level.
      self._possible_simple_keys = {}

   def tokens(self):
      """Scans the source.

      canonyaml.scanner.Token yield
         Next token. The last token is always a STREAM_END.
      """

      while True:
         while self._need_more_tokens():
            self._fetch_more_tokens()
         if not self._tokens:
            return
         token = self._tokens.pop(0)
         self._tokens_taken += 1
         yield token
         if token.kind is TokenKind.STREAM_END:
            return

   def _need_more_tokens(self):
      """Returns True if the head of the token queue cannot be released yet.

      bool return
         True if more tokens need to be scanned, or False otherwise.
      """

      if self._done:
         return False
      if not self._tokens:
         return True
      # The head token may be a simple key, in which case a BLOCK_MAP_KEY will need to go before it.
      self._stale_possible_simple_keys()
      return self._next_possible_simple_key() == self._tokens_taken

   def _fetch_more_tokens(self):
      """Scans the next token, and any INDENT/DEDENT tokens that need to precede it."""

      self._scan_to_next_token()
      self._stale_possible_simple_keys()
      self._unwind_indent(self._column)

      ch = self._peek()
      if ch == '\0':
         return self._fetch_stream_end()
      if self._column == 0:
         if ch == '%':
            return self._fetch_directive()
         if ch == '-' and self._check_document_marker('---'):
            return self._fetch_document_marker(TokenKind.DOC_START)
         if ch == '.' and self._check_document_marker('...'):
            return self._fetch_document_marker(TokenKind.DOC_END)
      if ch == '[':
         return self._fetch_flow_collection_start(TokenKind.FLOW_SEQ_START)
      if ch == '{':
         return self._fetch_flow_collection_start(TokenKind.FLOW_MAP_START)
      if ch == ']':
         return self._fetch_flow_collection_end(TokenKind.FLOW_SEQ_END)
      if ch == '}':
         return self._fetch_flow_collection_end(TokenKind.FLOW_MAP_END)
      if ch == ',':
         return self._fetch_flow_entry()
      if ch == '-' and self._peek(1) in self._blank_or_end:
         return self._fetch_block_entry()
      if ch == '?' and (self._flow_level or self._peek(1) in self._blank_or_end):
         return self._fetch_key()
      if ch == ':' and (self._flow_level or self._peek(1) in self._blank_or_end):
         return self._fetch_value()
      if ch == '*':
         return self._fetch_anchor_or_alias(TokenKind.ALIAS)
      if ch == '&':
         return self._fetch_anchor_or_alias(TokenKind.ANCHOR)
      if ch == '!':
         return self._fetch_tag()
      if ch in '|>' and not self._flow_level:
         return self._fetch_block_scalar(ch == '>')
      if ch in '\'"':
         return self._fetch_quoted_scalar(ch == '"')
      if self._check_plain():
         return self._fetch_plain()
      raise canonyaml.LexicalError(
         'found character “{}” that cannot start any token'.format(ch), self._get_mark()
      )

   # Source access.

   def _forward(self, length=1):
      """Advances the current position, keeping track of line and column.

      int length
         Count of characters to skip.
      """

      for i in range(length):
         ch = self._text[self._index]
         self._index += 1
         if ch in '\n\x85\u2028\u2029' or (ch == '\r' and self._peek() != '\n'):
            self._line += 1
            self._column = 0
         else:
            self._column += 1

   def _get_mark(self):
      """Returns the current position.

      canonyaml.Mark return
         Current position.
      """

      return canonyaml.Mark(self._source_name, self._first_line + self._line, self._column)

   def _peek(self, offset=0):
      """Returns a character ahead of the current position.

      int offset
         Distance from the current position.
      str return
         Character, or “\0” if past the end of the source.
      """

      index = self._index + offset
      if index < len(self._text):
         return self._text[index]
      else:
         return '\0'

   def _prefix(self, length):
      """Returns the characters starting at the current position.

      int length
         Count of characters to return.
      str return
         Characters; fewer than length if the source ends sooner.
      """

      return self._text[self._index:self._index + length]

   def _scan_line_break(self):
      """Consumes a line break, if one is at the current position.

      str return
         Normalized line break, or an empty string if no line break was found.
      """

      ch = self._peek()
      if ch in '\r\n\x85':
         if self._prefix(2) == '\r\n':
            self._forward(2)
         else:
            self._forward()
         return '\n'
      elif ch in '\u2028\u2029':
         self._forward()
         return ch
      return ''

   def _scan_to_next_token(self):
      """Skips whitespace, comments and line breaks."""

      if self._index == 0 and self._peek() == '\ufeff':
         self._forward()
      while True:
         line_start = self._column == 0
         tab_found = False
         while self._peek() in ' \t':
            if self._peek() == '\t':
               tab_found = True
            self._forward()
         ch = self._peek()
         if tab_found and line_start and not self._flow_level and ch not in '#\0' + self._breaks:
            raise canonyaml.LexicalError('tab character used for indentation', self._get_mark())
         if ch == '#':
            while self._peek() not in '\0' + self._breaks:
               self._forward()
         if self._scan_line_break():
            if not self._flow_level:
               self._allow_simple_key = True
         else:
            break

   # Indentation.

   def _add_indent(self, column):
      """Opens a new block indentation level, if column is deeper than the current one.

      int column
         Column of the new block collection.
      bool return
         True if a new level was opened, or False otherwise.
      """

      if self._indent < column:
         self._indents.append(self._indent)
         self._indent = column
         return True
      return False

   def _unwind_indent(self, column):
      """Closes all the block indentation levels deeper than column, emitting a DEDENT for each.

      int column
         Column of the next token.
      """

      # Indentation is meaningless in flow context.
      if self._flow_level:
         return
      while self._indent > column:
         mark = self._get_mark()
         self._indent = self._indents.pop()
         self._tokens.append(Token(TokenKind.DEDENT, None, mark, mark))

   # Simple keys.

   def _next_possible_simple_key(self):
      """Returns the number of the first token that could still become a simple key.

      int return
         Token number, or None if there are no candidate simple keys.
      """

      min_token_number = None
      for key in self._possible_simple_keys.values():
         if min_token_number is None or key.token_number < min_token_number:
            min_token_number = key.token_number
      return min_token_number

   def _remove_possible_simple_key(self):
      """Forgets the candidate simple key for the current flow level."""

      key = self._possible_simple_keys.pop(self._flow_level, None)
      if key and key.required:
         raise canonyaml.StructuralError('could not find expected “:” after mapping key', key.mark)

   def _save_possible_simple_key(self):
      """Remembers the next token as a candidate simple key, if a simple key is allowed here."""

      # A key at the same column as the current block mapping must be a key.
      required = not self._flow_level and self._indent == self._column
      if self._allow_simple_key:
         self._remove_possible_simple_key()
         self._possible_simple_keys[self._flow_level] = _SimpleKey(
            self._tokens_taken + len(self._tokens), required, self._index, self._line, self._get_mark()
         )

   def _stale_possible_simple_keys(self):
      """Forgets candidate simple keys that can no longer be followed by their “:”, since simple keys are
      limited to a single line of at most 1024 characters.
      """

      for level, key in list(self._possible_simple_keys.items()):
         if key.line != self._line or self._index - key.index > 1024:
            if key.required:
               raise canonyaml.StructuralError('could not find expected “:” after mapping key', key.mark)
            del self._possible_simple_keys[level]

   # Token fetchers.

   def _fetch_stream_end(self):
      if self._flow_level:
         raise canonyaml.LexicalError('unterminated flow collection', self._flow_start_marks[-1])
      self._unwind_indent(-1)
      self._remove_possible_simple_key()
      self._allow_simple_key = False
      self._possible_simple_keys = {}
      mark = self._get_mark()
      self._tokens.append(Token(TokenKind.STREAM_END, None, mark, mark))
      self._done = True

   def _fetch_directive(self):
      self._unwind_indent(-1)
      self._remove_possible_simple_key()
      self._allow_simple_key = False
      self._tokens.append(self._scan_directive())

   def _check_document_marker(self, marker):
      return self._prefix(3) == marker and self._peek(3) in self._blank_or_end

   def _fetch_document_marker(self, kind):
      self._unwind_indent(-1)
      self._remove_possible_simple_key()
      self._allow_simple_key = False
      start_mark = self._get_mark()
      self._forward(3)
      self._tokens.append(Token(kind, None, start_mark, self._get_mark()))

   def _fetch_flow_collection_start(self, kind):
      # “[” and “{” may start a simple key.
      self._save_possible_simple_key()
      start_mark = self._get_mark()
      self._flow_level += 1
      self._flow_start_marks.append(start_mark)
      self._allow_simple_key = True
      self._forward()
      self._tokens.append(Token(kind, None, start_mark, self._get_mark()))

   def _fetch_flow_collection_end(self, kind):
      self._remove_possible_simple_key()
      if self._flow_level:
         self._flow_level -= 1
         self._flow_start_marks.pop()
      self._allow_simple_key = False
      start_mark = self._get_mark()
      self._forward()
      self._tokens.append(Token(kind, None, start_mark, self._get_mark()))

   def _fetch_flow_entry(self):
      self._allow_simple_key = True
      self._remove_possible_simple_key()
      start_mark = self._get_mark()
      self._forward()
      self._tokens.append(Token(TokenKind.FLOW_ENTRY, None, start_mark, self._get_mark()))

   def _fetch_block_entry(self):
      start_mark = self._get_mark()
      if not self._flow_level:
         if not self._allow_simple_key:
            raise canonyaml.StructuralError('sequence entry not expected in this context', start_mark)
         if self._add_indent(self._column):
            self._tokens.append(Token(TokenKind.INDENT, None, start_mark, start_mark))
      self._allow_simple_key = True
      self._remove_possible_simple_key()
      self._forward()
      self._tokens.append(Token(TokenKind.BLOCK_SEQ_ITEM, None, start_mark, self._get_mark()))

   def _fetch_key(self):
      start_mark = self._get_mark()
      if not self._flow_level:
         if not self._allow_simple_key:
            raise canonyaml.StructuralError('mapping key not expected in this context', start_mark)
         if self._add_indent(self._column):
            self._tokens.append(Token(TokenKind.INDENT, None, start_mark, start_mark))
      self._allow_simple_key = not self._flow_level
      self._remove_possible_simple_key()
      self._forward()
      self._tokens.append(Token(TokenKind.BLOCK_MAP_KEY, None, start_mark, self._get_mark()))

   def _fetch_value(self):
      start_mark = self._get_mark()
      key = self._possible_simple_keys.pop(self._flow_level, None)
      if key:
         # Insert the key (and the start of the mapping, if it’s a new one) before the key’s first token.
         insert_at = key.token_number - self._tokens_taken
         self._tokens.insert(insert_at, Token(TokenKind.BLOCK_MAP_KEY, None, key.mark, key.mark))
         if not self._flow_level and self._add_indent(key.mark.column):
            self._tokens.insert(insert_at, Token(TokenKind.INDENT, None, key.mark, key.mark))
         # A simple key cannot be followed by another one on the same line.
         self._allow_simple_key = False
      else:
         # “:” after a complex (“?”) key, or without any key.
         if not self._flow_level:
            if not self._allow_simple_key:
               raise canonyaml.StructuralError('mapping value not expected in this context', start_mark)
            if self._add_indent(self._column):
               self._tokens.append(Token(TokenKind.INDENT, None, start_mark, start_mark))
         self._allow_simple_key = not self._flow_level
         self._remove_possible_simple_key()
      self._forward()
      self._tokens.append(Token(TokenKind.BLOCK_MAP_VALUE, None, start_mark, self._get_mark()))

   def _fetch_anchor_or_alias(self, kind):
      self._save_possible_simple_key()
      self._allow_simple_key = False
      start_mark = self._get_mark()
      self._forward()
      match = self._anchor_name_re.match(self._text, self._index)
      if not match:
         raise canonyaml.LexicalError('expected {} name'.format(kind), start_mark)
      name = match.group()
      self._forward(len(name))
      self._tokens.append(Token(kind, name, start_mark, self._get_mark()))

   def _fetch_tag(self):
      self._save_possible_simple_key()
      self._allow_simple_key = False
      self._tokens.append(self._scan_tag())

   def _fetch_block_scalar(self, folded):
      # A simple key may follow a block scalar, on the line that ends it.
      self._allow_simple_key = True
      self._remove_possible_simple_key()
      self._tokens.append(self._scan_block_scalar(folded))

   def _fetch_quoted_scalar(self, double):
      self._save_possible_simple_key()
      self._allow_simple_key = False
      self._tokens.append(self._scan_quoted_scalar(double))

   def _check_plain(self):
      """Returns True if a plain scalar starts at the current position.

      bool return
         True if the current character can start a plain scalar, or False otherwise.
      """

      ch = self._peek()
      if ch not in self._blank_or_end + '-?:,[]{}#&*!|>\'"%@`':
         return True
      # “-”, “?” and “:” can start a plain scalar if followed by a non-blank; “?” and “:” only in block
      # context.
      return self._peek(1) not in self._blank_or_end and (
         ch == '-' or (not self._flow_level and ch in '?:')
      )

   def _fetch_plain(self):
      self._save_possible_simple_key()
      self._allow_simple_key = False
      self._tokens.append(self._scan_plain())

   # Token scanners.

   def _scan_directive(self):
      """Scans a “%” directive line.

      canonyaml.scanner.Token return
         DIRECTIVE token.
      """

      start_mark = self._get_mark()
      self._forward()
      length = 0
      while self._peek(length) not in self._blank_or_end:
         length += 1
      name = self._prefix(length)
      self._forward(length)
      if not name:
         raise canonyaml.LexicalError('expected directive name', start_mark)
      length = 0
      while self._peek(length) not in '\0' + self._breaks:
         length += 1
      rest = self._prefix(length)
      self._forward(length)
      # Strip any trailing comment.
      comment_start = re.search(r'(?:^|[ \t])#', rest)
      if comment_start:
         rest = rest[:comment_start.start()]
      params = tuple(rest.split())
      if name == 'YAML':
         if len(params) != 1 or not self._yaml_directive_version_re.match(params[0]):
            raise canonyaml.LexicalError('malformed %YAML directive', start_mark)
      elif name == 'TAG':
         if len(params) != 2 or not self._tag_directive_handle_re.match(params[0]):
            raise canonyaml.LexicalError('malformed %TAG directive', start_mark)
      return Token(TokenKind.DIRECTIVE, (name, params), start_mark, self._get_mark())

   def _scan_tag(self):
      """Scans a tag, in any of its forms: “!<verbatim>”, “!”, “!suffix”, “!!suffix” or “!handle!suffix”.

      canonyaml.scanner.Token return
         TAG token.
      """

      start_mark = self._get_mark()
      ch = self._peek(1)
      if ch == '<':
         handle = None
         self._forward(2)
         suffix = self._scan_tag_uri(self._tag_uri_re)
         if self._peek() != '>':
            raise canonyaml.LexicalError('expected “>” to end verbatim tag', start_mark)
         self._forward()
         if not suffix:
            raise canonyaml.LexicalError('empty verbatim tag', start_mark)
      elif ch in self._blank_or_end:
         # Non-specific tag.
         handle = None
         suffix = '!'
         self._forward()
      else:
         handle = self._tag_handle_re.match(self._text, self._index).group()
         self._forward(len(handle))
         if self._flow_level:
            suffix = self._scan_tag_uri(self._flow_tag_uri_re)
         else:
            suffix = self._scan_tag_uri(self._tag_uri_re)
         if not suffix:
            raise canonyaml.LexicalError('expected tag suffix after “{}”'.format(handle), start_mark)
      ch = self._peek()
      if ch not in self._blank_or_end and not (self._flow_level and ch in ',[]{}'):
         raise canonyaml.LexicalError('unexpected character “{}” after tag'.format(ch), self._get_mark())
      return Token(TokenKind.TAG, (handle, suffix), start_mark, self._get_mark())

   def _scan_tag_uri(self, uri_re):
      """Scans the URI part of a tag, decoding %-escapes.

      re.RegExp uri_re
         Expression matching the characters allowed in the URI.
      str return
         Decoded URI; may be empty.
      """

      uri = uri_re.match(self._text, self._index).group()
      self._forward(len(uri))
      return urllib.parse.unquote(uri)

   def _scan_block_scalar(self, folded):
      """Scans a literal (“|”) or folded (“>”) block scalar.

      bool folded
         True if the scalar is folded, or False if it’s literal.
      canonyaml.scanner.Token return
         SCALAR token.
      """

      start_mark = self._get_mark()
      self._forward()
      chomping, increment = self._scan_block_scalar_indicators(start_mark)
      self._scan_block_scalar_ignored_line(start_mark)

      min_indent = max(self._indent + 1, 1)
      if increment is None:
         breaks, max_indent = self._scan_block_scalar_indentation()
         indent = max(min_indent, max_indent)
      else:
         indent = min_indent + increment - 1
         breaks = self._scan_block_scalar_breaks(indent)

      chunks = []
      line_break = ''
      while self._column == indent and self._peek() != '\0':
         chunks.extend(breaks)
         # Lines starting with a blank are “more indented”, and are never folded.
         leading_non_space = self._peek() not in ' \t'
         length = 0
         while self._peek(length) not in '\0' + self._breaks:
            length += 1
         chunks.append(self._prefix(length))
         self._forward(length)
         line_break = self._scan_line_break()
         breaks = self._scan_block_scalar_breaks(indent)
         if self._column == indent and self._peek() != '\0':
            if folded and line_break == '\n' and leading_non_space and self._peek() not in ' \t':
               if not breaks:
                  chunks.append(' ')
            else:
               chunks.append(line_break)
         else:
            break

      # Chomp the tail: clip keeps the last line break, keep also keeps any trailing blank lines.
      if chomping is not False:
         chunks.append(line_break)
      if chomping is True:
         chunks.extend(breaks)
      style = ScalarStyle.FOLDED if folded else ScalarStyle.LITERAL
      return Token(TokenKind.SCALAR, ''.join(chunks), start_mark, self._get_mark(), style)

   def _scan_block_scalar_indicators(self, start_mark):
      """Scans the chomping and indentation indicators of a block scalar, in either order.

      canonyaml.Mark start_mark
         Start of the block scalar.
      tuple(bool, int) return
         Chomping (True to keep, False to strip, None to clip) and explicit indentation (None if not
         specified).
      """

      chomping = None
      increment = None
      ch = self._peek()
      if ch in '+-':
         chomping = ch == '+'
         self._forward()
         ch = self._peek()
         if ch in '0123456789':
            increment = self._scan_block_scalar_increment(start_mark)
      elif ch in '0123456789':
         increment = self._scan_block_scalar_increment(start_mark)
         ch = self._peek()
         if ch in '+-':
            chomping = ch == '+'
            self._forward()
      ch = self._peek()
      if ch not in self._blank_or_end:
         raise canonyaml.LexicalError(
            'expected chomping or indentation indicator, found “{}”'.format(ch), self._get_mark()
         )
      return chomping, increment

   def _scan_block_scalar_increment(self, start_mark):
      increment = int(self._peek())
      if increment == 0:
         raise canonyaml.LexicalError('indentation indicator must be between 1 and 9', start_mark)
      self._forward()
      return increment

   def _scan_block_scalar_ignored_line(self, start_mark):
      """Skips the remainder of the line containing the block scalar header."""

      while self._peek() in ' \t':
         self._forward()
      if self._peek() == '#':
         while self._peek() not in '\0' + self._breaks:
            self._forward()
      ch = self._peek()
      if ch not in '\0' + self._breaks:
         raise canonyaml.LexicalError(
            'unexpected character “{}” after block scalar header'.format(ch), self._get_mark()
         )
      self._scan_line_break()

   def _scan_block_scalar_indentation(self):
      """Skips the leading empty lines of a block scalar, tracking the deepest indentation found.

      tuple(list(str), int) return
         Line breaks found, and the deepest column reached.
      """

      chunks = []
      max_indent = 0
      while self._peek() in ' ' + self._breaks:
         if self._peek() != ' ':
            chunks.append(self._scan_line_break())
         else:
            self._forward()
            if self._column > max_indent:
               max_indent = self._column
      return chunks, max_indent

   def _scan_block_scalar_breaks(self, indent):
      """Skips empty lines and the indentation of the next non-empty line, up to indent.

      int indent
         Indentation of the block scalar.
      list(str) return
         Line breaks found.
      """

      chunks = []
      while self._column < indent and self._peek() == ' ':
         self._forward()
      while self._peek() in self._breaks:
         chunks.append(self._scan_line_break())
         while self._column < indent and self._peek() == ' ':
            self._forward()
      return chunks

   def _scan_quoted_scalar(self, double):
      """Scans a single- or double-quoted scalar.

      bool double
         True if the scalar is double-quoted, or False if single-quoted.
      canonyaml.scanner.Token return
         SCALAR token.
      """

      start_mark = self._get_mark()
      quote = self._peek()
      self._forward()
      chunks = self._scan_quoted_scalar_non_spaces(double, start_mark)
      while self._peek() != quote:
         chunks.extend(self._scan_quoted_scalar_spaces(start_mark))
         chunks.extend(self._scan_quoted_scalar_non_spaces(double, start_mark))
      self._forward()
      style = ScalarStyle.DOUBLE_QUOTED if double else ScalarStyle.SINGLE_QUOTED
      return Token(TokenKind.SCALAR, ''.join(chunks), start_mark, self._get_mark(), style)

   def _scan_quoted_scalar_non_spaces(self, double, start_mark):
      chunks = []
      while True:
         length = 0
         while self._peek(length) not in '\'"\\\0 \t' + self._breaks:
            length += 1
         if length:
            chunks.append(self._prefix(length))
            self._forward(length)
         ch = self._peek()
         if not double and ch == '\'' and self._peek(1) == '\'':
            chunks.append('\'')
            self._forward(2)
         elif (double and ch == '\'') or (not double and ch in '"\\'):
            chunks.append(ch)
            self._forward()
         elif double and ch == '\\':
            self._forward()
            chunks.extend(self._scan_escape(start_mark))
         else:
            return chunks

   def _scan_escape(self, start_mark):
      """Scans the part of an escape sequence following the backslash.

      canonyaml.Mark start_mark
         Start of the double-quoted scalar.
      list(str) return
         Characters represented by the escape sequence.
      """

      ch = self._peek()
      if ch in self._escape_replacements:
         self._forward()
         return [self._escape_replacements[ch]]
      elif ch in self._escape_codes:
         length = self._escape_codes[ch]
         self._forward()
         digits = self._prefix(length)
         if len(digits) < length or not re.match(r'^[0-9A-Fa-f]+$', digits):
            raise canonyaml.LexicalError(
               'expected escape sequence of {} hexadecimal digits, found “{}”'.format(length, digits),
               self._get_mark()
            )
         code = int(digits, 16)
         if code > 0x10ffff:
            raise canonyaml.LexicalError('invalid code point “\\{}{}”'.format(ch, digits), self._get_mark())
         self._forward(length)
         return [chr(code)]
      elif ch in self._breaks:
         # Escaped line break: join the lines without adding a space.
         self._scan_line_break()
         return self._scan_quoted_scalar_breaks(start_mark)
      elif ch == '\0':
         raise canonyaml.LexicalError('unterminated quoted scalar', start_mark)
      else:
         raise canonyaml.LexicalError('unknown escape sequence “\\{}”'.format(ch), self._get_mark())

   def _scan_quoted_scalar_spaces(self, start_mark):
      chunks = []
      length = 0
      while self._peek(length) in ' \t':
         length += 1
      whitespace = self._prefix(length)
      self._forward(length)
      ch = self._peek()
      if ch == '\0':
         raise canonyaml.LexicalError('unterminated quoted scalar', start_mark)
      elif ch in self._breaks:
         # Fold: a single line break becomes a space, any further ones are kept; trailing blanks are dropped.
         line_break = self._scan_line_break()
         breaks = self._scan_quoted_scalar_breaks(start_mark)
         if line_break != '\n':
            chunks.append(line_break)
         elif not breaks:
            chunks.append(' ')
         chunks.extend(breaks)
      else:
         chunks.append(whitespace)
      return chunks

   def _scan_quoted_scalar_breaks(self, start_mark):
      chunks = []
      while True:
         # Quoted scalars don’t need to respect indentation, but they can’t contain document markers.
         if self._column == 0 and (self._check_document_marker('---') or self._check_document_marker('...')):
            raise canonyaml.LexicalError('unterminated quoted scalar (found document marker)', start_mark)
         while self._peek() in ' \t':
            self._forward()
         if self._peek() in self._breaks:
            chunks.append(self._scan_line_break())
         else:
            return chunks

   def _scan_plain(self):
      """Scans a plain (unquoted) scalar, which may span multiple lines.

      canonyaml.scanner.Token return
         SCALAR token.
      """

      chunks = []
      start_mark = self._get_mark()
      end_mark = start_mark
      # Continuation lines must be more indented than the enclosing block collection.
      indent = self._indent + 1
      spaces = []
      while True:
         if self._peek() == '#':
            break
         length = 0
         while True:
            ch = self._peek(length)
            if ch in self._blank_or_end:
               break
            if self._flow_level:
               if ch in ',[]{}' or (ch == ':' and self._peek(length + 1) in self._blank_or_end + ',[]{}'):
                  break
            elif ch == ':' and self._peek(length + 1) in self._blank_or_end:
               break
            length += 1
         if length == 0:
            break
         self._allow_simple_key = False
         chunks.extend(spaces)
         chunks.append(self._prefix(length))
         self._forward(length)
         end_mark = self._get_mark()
         spaces = self._scan_plain_spaces()
         if not spaces or self._peek() == '#' or (not self._flow_level and self._column < indent):
            break
      return Token(TokenKind.SCALAR, ''.join(chunks), start_mark, end_mark, ScalarStyle.PLAIN)

   def _scan_plain_spaces(self):
      """Scans the whitespace following a portion of a plain scalar, folding any line breaks.

      list(str) return
         Whitespace to insert if the scalar continues; empty if the scalar cannot continue.
      """

      chunks = []
      length = 0
      while self._peek(length) in ' \t':
         length += 1
      whitespace = self._prefix(length)
      self._forward(length)
      ch = self._peek()
      if ch in self._breaks:
         line_break = self._scan_line_break()
         self._allow_simple_key = True
         if self._check_document_marker('---') or self._check_document_marker('...'):
            return []
         breaks = []
         while self._peek() in ' \t' + self._breaks:
            if self._peek() in ' \t':
               self._forward()
            else:
               breaks.append(self._scan_line_break())
               if self._check_document_marker('---') or self._check_document_marker('...'):
                  return []
         if line_break != '\n':
            chunks.append(line_break)
         elif not breaks:
            chunks.append(' ')
         chunks.extend(breaks)
      elif whitespace:
         chunks.append(whitespace)
      return chunks
