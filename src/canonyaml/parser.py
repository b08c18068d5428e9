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

"""YAML parser."""

import canonyaml
import canonyaml.logging
from canonyaml.nodes import MappingNode, ScalarNode, SequenceNode
from canonyaml.scanner import ScalarStyle, Token, TokenKind


##############################################################################################################

def parse(tokens, source_name='<string>'):
   """Parses the first document in a token sequence.

   iterable(canonyaml.scanner.Token) tokens
      Tokens, as returned by canonyaml.scanner.Scanner.tokens().
   str source_name
      Name of the source for use in diagnostic messages.
   canonyaml.nodes.Node return
      Root node of the first document, or None if there are no documents.
   """

   for document in Parser(tokens, source_name).documents():
      return document.root
   return None

##############################################################################################################

class Document(object):
   """Parsed, but not yet resolved, YAML document."""

   # True if the document was started with “---”.
   explicit = False
   # Root node.
   root = None
   # Position of the start of the document.
   start_mark = None
   # Tag handles in effect for the document (handle -> prefix).
   tag_handles = None
   # Version from the %YAML directive, or None if not specified.
   version = None

   def __init__(self, root, version, tag_handles, explicit, start_mark=None):
      """Constructor.

      canonyaml.nodes.Node root
         Root node.
      str version
         YAML version, e.g. “1.1”.
      dict(str: str) tag_handles
         Tag handles in effect for the document.
      bool explicit
         True if the document had a “---” marker.
      canonyaml.Mark start_mark
         Start of the document.
      """

      self.root = root
      self.version = version
      self.tag_handles = tag_handles
      self.explicit = explicit
      self.start_mark = start_mark

   def __repr__(self):
      return 'Document({!r}, version={!r})'.format(self.root, self.version)

##############################################################################################################

class Parser(object):
   """YAML parser. Builds canonyaml.nodes.Node trees out of the tokens produced by canonyaml.scanner.Scanner,
   one document at a time.

   Block collections are delimited by the INDENT/DEDENT tokens emitted by the scanner, flow collections by
   their brackets. Anchors are tracked per document, and an alias evaluates to the very same node object that
   was anchored.
   """

   # Tag handles available in every document.
   _default_tag_handles = {
      '!' : '!',
      '!!': 'tag:yaml.org,2002:',
   }

   def __init__(self, tokens, source_name='<string>', logger=None):
      """Constructor.

      iterable(canonyaml.scanner.Token) tokens
         Tokens to parse.
      str source_name
         Name of the source for use in diagnostic messages.
      canonyaml.logging.Logger logger
         Logger to report ignored directives to.
      """

      self._tokens = iter(tokens)
      self._source_name = source_name
      if logger is None:
         logger = canonyaml.logging.Logger(canonyaml.logging.LogGenerator())
      self._log = logger
      # Lookahead token.
      self._next_token = None
      self._last_mark = canonyaml.Mark(source_name, 0, 0)
      self._anchors = {}
      self._tag_handles = dict(self._default_tag_handles)

   def consume_document(self):
      """Consumes a document, including the directives and markers around it.

      canonyaml.parser.Document return
         Parsed document.
      """

      # Anchors and tag handles don’t carry over from previous documents.
      self._anchors = {}
      self._tag_handles = dict(self._default_tag_handles)
      start_mark = self._peek().start_mark
      version = None
      declared_handles = set()
      while self._check(TokenKind.DIRECTIVE):
         token = self._take()
         name, params = token.value
         if name == 'YAML':
            if version is not None:
               self.raise_parsing_error('duplicate %YAML directive', token.start_mark)
            version = params[0]
            if version.split('.')[0] != '1':
               self.raise_parsing_error('unsupported YAML version: {}'.format(version), token.start_mark)
         elif name == 'TAG':
            handle, prefix = params
            if handle in declared_handles:
               self.raise_parsing_error('duplicate %TAG directive for “{}”'.format(handle), token.start_mark)
            declared_handles.add(handle)
            self._tag_handles[handle] = prefix
         else:
            self._log(self._log.MEDIUM, '{}: ignoring unknown directive %{}', token.start_mark, name)

      explicit = self._check(TokenKind.DOC_START)
      if explicit:
         self._take()
      elif version is not None or declared_handles:
         self.raise_parsing_error(
            'expected document start “---” after directives, found {}'.format(self._peek().kind),
            self._peek().start_mark
         )

      if self._check(TokenKind.DOC_START, TokenKind.DOC_END, TokenKind.DIRECTIVE, TokenKind.STREAM_END):
         root = self._empty_scalar(None, None, self._peek().start_mark)
      else:
         root = self.consume_node(True)

      if self._check(TokenKind.DOC_END):
         self._take()
      elif not self._check(TokenKind.DOC_START, TokenKind.DIRECTIVE, TokenKind.STREAM_END):
         token = self._peek()
         self.raise_parsing_error('expected end of document, found {}'.format(token.kind), token.start_mark)
      return Document(root, version, dict(self._tag_handles), explicit, start_mark)

   def consume_mapping_block(self, tag, anchor, start_mark):
      """Consumes a block mapping; the INDENT preceding it must have already been consumed.

      str tag
         Tag of the mapping.
      str anchor
         Anchor of the mapping.
      canonyaml.Mark start_mark
         Start of the mapping.
      canonyaml.nodes.MappingNode return
         Parsed mapping.
      """

      pairs = []
      while True:
         token = self._peek()
         if token.kind is TokenKind.BLOCK_MAP_KEY:
            self._take()
            if self._check(TokenKind.BLOCK_MAP_KEY, TokenKind.BLOCK_MAP_VALUE, TokenKind.DEDENT):
               key = self._empty_scalar(None, None, token.end_mark)
            else:
               key = self.consume_node(True, True)
         elif token.kind is TokenKind.BLOCK_MAP_VALUE:
            # Value without a key.
            key = self._empty_scalar(None, None, token.start_mark)
         elif token.kind is TokenKind.DEDENT:
            self._take()
            break
         else:
            self.raise_parsing_error('expected mapping key, found {}'.format(token.kind), token.start_mark)

         if self._check(TokenKind.BLOCK_MAP_VALUE):
            token = self._take()
            if self._check(TokenKind.BLOCK_MAP_KEY, TokenKind.BLOCK_MAP_VALUE, TokenKind.DEDENT):
               value = self._empty_scalar(None, None, token.end_mark)
            else:
               value = self.consume_node(True, True)
         else:
            value = self._empty_scalar(None, None, self._peek().start_mark)
         pairs.append((key, value))
      return MappingNode(pairs, tag, start_mark, anchor)

   def consume_mapping_flow(self, tag, anchor, start_mark):
      """Consumes a flow mapping, starting from its “{”.

      str tag
         Tag of the mapping.
      str anchor
         Anchor of the mapping.
      canonyaml.Mark start_mark
         Start of the mapping.
      canonyaml.nodes.MappingNode return
         Parsed mapping.
      """

      self._take()
      pairs = []
      while not self._check(TokenKind.FLOW_MAP_END):
         if pairs:
            self._expect_flow_entry(TokenKind.FLOW_MAP_END)
            # Trailing commas are allowed.
            if self._check(TokenKind.FLOW_MAP_END):
               break
         pairs.append(self._consume_flow_pair(TokenKind.FLOW_MAP_END))
      self._take()
      return MappingNode(pairs, tag, start_mark, anchor, flow_style=True)

   def consume_node(self, block, indentless_sequence_allowed=False):
      """Consumes a node along with its properties (anchor and tag), or an alias.

      bool block
         True if the node is in block context, or False if it’s in flow context.
      bool indentless_sequence_allowed
         True if a block sequence may start without indentation, i.e. if the node is a block mapping value.
      canonyaml.nodes.Node return
         Parsed node.
      """

      anchor, tag, start_mark = self.consume_properties()
      token = self._peek()
      if token.kind is TokenKind.ALIAS:
         if anchor is not None or tag is not None:
            self.raise_parsing_error('an alias cannot have an anchor or a tag', start_mark)
         self._take()
         node = self._anchors.get(token.value)
         if node is None:
            self.raise_parsing_error('undefined alias “*{}”'.format(token.value), token.start_mark)
         return node

      if block and indentless_sequence_allowed and token.kind is TokenKind.BLOCK_SEQ_ITEM:
         node = self.consume_sequence_indentless(tag, anchor, start_mark)
      elif block and token.kind is TokenKind.INDENT:
         self._take()
         token = self._peek()
         if token.kind is TokenKind.BLOCK_SEQ_ITEM:
            node = self.consume_sequence_block(tag, anchor, start_mark)
         elif token.kind is TokenKind.BLOCK_MAP_KEY or token.kind is TokenKind.BLOCK_MAP_VALUE:
            node = self.consume_mapping_block(tag, anchor, start_mark)
         else:
            self.raise_parsing_error(
               'expected block collection, found {}'.format(token.kind), token.start_mark
            )
      elif token.kind is TokenKind.SCALAR:
         self._take()
         node = ScalarNode(token.value, token.style, tag, start_mark, anchor)
      elif token.kind is TokenKind.FLOW_SEQ_START:
         node = self.consume_sequence_flow(tag, anchor, start_mark)
      elif token.kind is TokenKind.FLOW_MAP_START:
         node = self.consume_mapping_flow(tag, anchor, start_mark)
      elif anchor is not None or tag is not None:
         # Properties without content.
         node = self._empty_scalar(tag, anchor, start_mark)
      else:
         self.raise_parsing_error('expected node content, found {}'.format(token.kind), token.start_mark)

      if anchor is not None:
         # Last definition wins.
         self._anchors[anchor] = node
      return node

   def consume_properties(self):
      """Consumes the anchor and tag preceding a node, if any, in any order.

      tuple(str, str, canonyaml.Mark) return
         Anchor name, fully-expanded tag, and start of the node.
      """

      anchor = None
      tag = None
      start_mark = self._peek().start_mark
      while True:
         token = self._peek()
         if token.kind is TokenKind.ANCHOR:
            if anchor is not None:
               self.raise_parsing_error('node has more than one anchor', token.start_mark)
            self._take()
            anchor = token.value
         elif token.kind is TokenKind.TAG:
            if tag is not None:
               self.raise_parsing_error('node has more than one tag', token.start_mark)
            self._take()
            tag = self._expand_tag(token)
         else:
            return anchor, tag, start_mark

   def consume_sequence_block(self, tag, anchor, start_mark):
      """Consumes a block sequence; the INDENT preceding it must have already been consumed.

      str tag
         Tag of the sequence.
      str anchor
         Anchor of the sequence.
      canonyaml.Mark start_mark
         Start of the sequence.
      canonyaml.nodes.SequenceNode return
         Parsed sequence.
      """

      items = []
      while True:
         token = self._peek()
         if token.kind is TokenKind.BLOCK_SEQ_ITEM:
            self._take()
            if self._check(TokenKind.BLOCK_SEQ_ITEM, TokenKind.DEDENT):
               items.append(self._empty_scalar(None, None, token.end_mark))
            else:
               items.append(self.consume_node(True))
         elif token.kind is TokenKind.DEDENT:
            self._take()
            break
         else:
            self.raise_parsing_error('expected sequence entry, found {}'.format(token.kind), token.start_mark)
      return SequenceNode(items, tag, start_mark, anchor)

   def consume_sequence_flow(self, tag, anchor, start_mark):
      """Consumes a flow sequence, starting from its “[”. Entries can be single-pair mappings (“[a: b]”).

      str tag
         Tag of the sequence.
      str anchor
         Anchor of the sequence.
      canonyaml.Mark start_mark
         Start of the sequence.
      canonyaml.nodes.SequenceNode return
         Parsed sequence.
      """

      self._take()
      items = []
      while not self._check(TokenKind.FLOW_SEQ_END):
         if items:
            self._expect_flow_entry(TokenKind.FLOW_SEQ_END)
            if self._check(TokenKind.FLOW_SEQ_END):
               break
         if self._check(TokenKind.BLOCK_MAP_KEY, TokenKind.BLOCK_MAP_VALUE):
            pair_mark = self._peek().start_mark
            pair = self._consume_flow_pair(TokenKind.FLOW_SEQ_END)
            items.append(MappingNode([pair], None, pair_mark, None, flow_style=True))
         else:
            items.append(self.consume_node(False))
      self._take()
      return SequenceNode(items, tag, start_mark, anchor, flow_style=True)

   def consume_sequence_indentless(self, tag, anchor, start_mark):
      """Consumes a block sequence whose entries are at the same column as the mapping key it’s the value of.
      Such a sequence has no INDENT/DEDENT tokens around it.

      str tag
         Tag of the sequence.
      str anchor
         Anchor of the sequence.
      canonyaml.Mark start_mark
         Start of the sequence.
      canonyaml.nodes.SequenceNode return
         Parsed sequence.
      """

      items = []
      while self._check(TokenKind.BLOCK_SEQ_ITEM):
         token = self._take()
         if self._check(
            TokenKind.BLOCK_SEQ_ITEM, TokenKind.BLOCK_MAP_KEY, TokenKind.BLOCK_MAP_VALUE, TokenKind.DEDENT
         ):
            items.append(self._empty_scalar(None, None, token.end_mark))
         else:
            items.append(self.consume_node(True))
      return SequenceNode(items, tag, start_mark, anchor)

   def documents(self):
      """Parses all the documents in the token sequence.

      canonyaml.parser.Document yield
         Parsed document.
      """

      while True:
         # Stray document end markers separate nothing.
         while self._check(TokenKind.DOC_END):
            self._take()
         if self._check(TokenKind.STREAM_END):
            return
         yield self.consume_document()

   def raise_parsing_error(self, message, mark=None):
      """Raises a canonyaml.StructuralError.

      str message
         Error message.
      canonyaml.Mark mark
         Position of the error; defaults to the position of the last token read.
      """

      raise canonyaml.StructuralError(message, mark or self._last_mark)

   def _check(self, *kinds):
      """Returns True if the next token is of one of the specified kinds.

      iterable(canonyaml.scanner.TokenKind) *kinds
         Token kinds to check for.
      bool return
         True if the next token is of one of the kinds, or False otherwise.
      """

      return self._peek().kind in kinds

   def _consume_flow_pair(self, end_kind):
      """Consumes a key/value pair in a flow collection. Either the key or the value may be missing.

      canonyaml.scanner.TokenKind end_kind
         Kind of the token that ends the flow collection.
      tuple(canonyaml.nodes.Node, canonyaml.nodes.Node) return
         Key and value.
      """

      if self._check(TokenKind.BLOCK_MAP_KEY):
         token = self._take()
         if self._check(TokenKind.BLOCK_MAP_VALUE, TokenKind.FLOW_ENTRY, end_kind):
            key = self._empty_scalar(None, None, token.end_mark)
         else:
            key = self.consume_node(False)
      elif self._check(TokenKind.BLOCK_MAP_VALUE):
         key = self._empty_scalar(None, None, self._peek().start_mark)
      else:
         key = self.consume_node(False)

      if self._check(TokenKind.BLOCK_MAP_VALUE):
         token = self._take()
         if self._check(TokenKind.FLOW_ENTRY, end_kind):
            value = self._empty_scalar(None, None, token.end_mark)
         else:
            value = self.consume_node(False)
      else:
         value = self._empty_scalar(None, None, self._peek().start_mark)
      return key, value

   def _empty_scalar(self, tag, anchor, mark):
      """Returns a node for missing content: an empty plain scalar, which resolves to null.

      str tag
         Tag of the node.
      str anchor
         Anchor of the node.
      canonyaml.Mark mark
         Position of the node.
      canonyaml.nodes.ScalarNode return
         Empty node.
      """

      return ScalarNode('', ScalarStyle.PLAIN, tag, mark, anchor)

   def _expand_tag(self, token):
      """Expands a TAG token into a full tag using the tag handles in effect.

      canonyaml.scanner.Token token
         TAG token.
      str return
         Expanded tag.
      """

      handle, suffix = token.value
      if handle is None:
         # Verbatim or non-specific.
         return suffix
      prefix = self._tag_handles.get(handle)
      if prefix is None:
         self.raise_parsing_error('undefined tag handle “{}”'.format(handle), token.start_mark)
      return prefix + suffix

   def _expect_flow_entry(self, end_kind):
      """Consumes the “,” between flow collection entries.

      canonyaml.scanner.TokenKind end_kind
         Kind of the token that ends the flow collection.
      """

      token = self._peek()
      if token.kind is not TokenKind.FLOW_ENTRY:
         self.raise_parsing_error(
            'expected {} or {}, found {}'.format(TokenKind.FLOW_ENTRY, end_kind, token.kind), token.start_mark
         )
      self._take()

   def _peek(self):
      """Returns the next token without consuming it.

      canonyaml.scanner.Token return
         Next token. If the token sequence ended without a STREAM_END, a STREAM_END is synthesized.
      """

      if self._next_token is None:
         self._next_token = next(self._tokens, None)
         if self._next_token is None:
            self._next_token = Token(TokenKind.STREAM_END, None, self._last_mark, self._last_mark)
      return self._next_token

   def _take(self):
      """Consumes the next token.

      canonyaml.scanner.Token return
         Consumed token.
      """

      token = self._peek()
      self._next_token = None
      self._last_mark = token.end_mark
      return token
