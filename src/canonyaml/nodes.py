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

"""YAML nodes: the untyped document structure built by the parser."""

import canonyaml
from canonyaml.scanner import ScalarStyle


##############################################################################################################

class Node(object):
   """Base class for YAML nodes. Nodes are not modified after the parser is done building them, and equality
   between nodes is structural: positions and anchors are not taken into account.
   """

   # Name of the anchor the node was declared with, if any.
   anchor = None
   # Kind of the node (canonyaml.Kind.*).
   kind = None
   # Position of the node in the source.
   start_mark = None
   # Fully-expanded tag, or None if the node had no explicit tag.
   tag = None

   def __init__(self, tag, start_mark, anchor):
      self.tag = tag
      self.start_mark = start_mark
      self.anchor = anchor

   def __ne__(self, other):
      return not self.__eq__(other)

   # Nodes are compared by contents, which may change until the parser is done with them.
   __hash__ = None

##############################################################################################################

class ScalarNode(Node):
   """Scalar node."""

   kind = canonyaml.Kind.SCALAR
   # Presentation style (canonyaml.scanner.ScalarStyle.*).
   style = None
   # Text of the scalar, after escapes and folding have been processed.
   value = None

   def __init__(self, value, style=ScalarStyle.PLAIN, tag=None, start_mark=None, anchor=None):
      """Constructor.

      str value
         Text of the scalar.
      canonyaml.scanner.ScalarStyle style
         Presentation style.
      str tag
         Explicit tag.
      canonyaml.Mark start_mark
         Position of the node in the source.
      str anchor
         Anchor name.
      """

      Node.__init__(self, tag, start_mark, anchor)
      self.value = value
      self.style = style

   def __eq__(self, other):
      return (
         isinstance(other, ScalarNode) and
         self.tag == other.tag and self.value == other.value and self.style is other.style
      )

   def __repr__(self):
      if self.tag:
         return 'ScalarNode({!r}, {}, tag={!r})'.format(self.value, self.style, self.tag)
      else:
         return 'ScalarNode({!r}, {})'.format(self.value, self.style)

##############################################################################################################

class SequenceNode(Node):
   """Sequence node."""

   # True if the sequence was written in flow style ([...]).
   flow_style = False
   kind = canonyaml.Kind.SEQUENCE
   # Child nodes.
   items = None

   def __init__(self, items, tag=None, start_mark=None, anchor=None, flow_style=False):
      """Constructor.

      list(canonyaml.nodes.Node) items
         Child nodes.
      str tag
         Explicit tag.
      canonyaml.Mark start_mark
         Position of the node in the source.
      str anchor
         Anchor name.
      bool flow_style
         True if the sequence was written in flow style.
      """

      Node.__init__(self, tag, start_mark, anchor)
      self.items = items
      self.flow_style = flow_style

   def __eq__(self, other):
      return isinstance(other, SequenceNode) and self.tag == other.tag and self.items == other.items

   def __repr__(self):
      if self.tag:
         return 'SequenceNode({!r}, tag={!r})'.format(self.items, self.tag)
      else:
         return 'SequenceNode({!r})'.format(self.items)

##############################################################################################################

class MappingNode(Node):
   """Mapping node. Keys can be nodes of any kind, and are kept in source order along with their values."""

   # True if the mapping was written in flow style ({...}).
   flow_style = False
   kind = canonyaml.Kind.MAPPING
   # (key, value) node pairs.
   pairs = None

   def __init__(self, pairs, tag=None, start_mark=None, anchor=None, flow_style=False):
      """Constructor.

      list(tuple(canonyaml.nodes.Node, canonyaml.nodes.Node)) pairs
         Key/value node pairs.
      str tag
         Explicit tag.
      canonyaml.Mark start_mark
         Position of the node in the source.
      str anchor
         Anchor name.
      bool flow_style
         True if the mapping was written in flow style.
      """

      Node.__init__(self, tag, start_mark, anchor)
      self.pairs = pairs
      self.flow_style = flow_style

   def __eq__(self, other):
      return isinstance(other, MappingNode) and self.tag == other.tag and self.pairs == other.pairs

   def __repr__(self):
      if self.tag:
         return 'MappingNode({!r}, tag={!r})'.format(self.pairs, self.tag)
      else:
         return 'MappingNode({!r})'.format(self.pairs)
