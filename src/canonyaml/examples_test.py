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

"""Test cases replaying the examples in chapter 2 (“Preview”) of YAML 1.2."""

import base64
import collections
import datetime
import io
import math
import textwrap
import unittest

import canonyaml as y
import canonyaml.logging as yl
import canonyaml.resolver as yr
import canonyaml.stream as ys


def _decoder():
   # Keep log output out of the test results.
   return ys.Decoder(logger=yl.Logger(yl.LogGenerator(io.StringIO())))

def decode_string(s):
   return _decoder().decode_string(s)

def decode_all(s):
   return list(_decoder().decode_stream(s))


##############################################################################################################

class SequenceOfScalarsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         - Mark McGwire
         - Sammy Sosa
         - Ken Griffey
      ''')), ['Mark McGwire', 'Sammy Sosa', 'Ken Griffey'])

##############################################################################################################

class MappingScalarsToScalarsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         hr:  65    # Home runs
         avg: 0.278 # Batting average
         rbi: 147   # Runs Batted In
      ''')), {'hr': 65, 'avg': 0.278, 'rbi': 147})

##############################################################################################################

class MappingScalarsToSequencesTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         american:
         - Boston Red Sox
         - Detroit Tigers
         - New York Yankees
         national:
         - New York Mets
         - Chicago Cubs
         - Atlanta Braves
      ''')), {
         'american': ['Boston Red Sox', 'Detroit Tigers', 'New York Yankees'],
         'national': ['New York Mets', 'Chicago Cubs', 'Atlanta Braves'],
      })

##############################################################################################################

class SequenceOfMappingsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         -
           name: Mark McGwire
           hr:   65
           avg:  0.278
         -
           name: Sammy Sosa
           hr:   63
           avg:  0.288
      ''')), [
         {'name': 'Mark McGwire', 'hr': 65, 'avg': 0.278},
         {'name': 'Sammy Sosa', 'hr': 63, 'avg': 0.288},
      ])

##############################################################################################################

class SequenceOfSequencesTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         - [name        , hr, avg  ]
         - [Mark McGwire, 65, 0.278]
         - [Sammy Sosa  , 63, 0.288]
      ''')), [
         ['name', 'hr', 'avg'],
         ['Mark McGwire', 65, 0.278],
         ['Sammy Sosa', 63, 0.288],
      ])

##############################################################################################################

class MappingOfMappingsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         Mark McGwire: {hr: 65, avg: 0.278}
         Sammy Sosa: {
             hr: 63,
             avg: 0.288
           }
      ''')), {
         'Mark McGwire': {'hr': 65, 'avg': 0.278},
         'Sammy Sosa': {'hr': 63, 'avg': 0.288},
      })

      # Trailing comma, closing brace at column 0.
      self.assertEqual(decode_string(textwrap.dedent('''
         Sammy Sosa: {
           hr: 63,
           avg: 0.288,
         }
      ''')), {'Sammy Sosa': {'hr': 63, 'avg': 0.288}})

##############################################################################################################

class TwoDocumentsInAStreamTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_all(textwrap.dedent('''
         # Ranking of 1998 home runs
         ---
         - Mark McGwire
         - Sammy Sosa
         - Ken Griffey

         # Team ranking
         ---
         - Chicago Cubs
         - St Louis Cardinals
      ''')), [
         ['Mark McGwire', 'Sammy Sosa', 'Ken Griffey'],
         ['Chicago Cubs', 'St Louis Cardinals'],
      ])

##############################################################################################################

class PlayByPlayFeedTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_all(textwrap.dedent('''
         ---
         time: 20:03:20
         player: Sammy Sosa
         action: strike (miss)
         ...
         ---
         time: 20:03:47
         player: Sammy Sosa
         action: grand slam
         ...
      ''')), [
         {'time': '20:03:20', 'player': 'Sammy Sosa', 'action': 'strike (miss)'},
         {'time': '20:03:47', 'player': 'Sammy Sosa', 'action': 'grand slam'},
      ])

##############################################################################################################

class CommentsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         ---
         hr: # 1998 hr ranking
           - Mark McGwire
           - Sammy Sosa
         rbi:
           # 1998 rbi ranking
           - Sammy Sosa
           - Ken Griffey
      ''')), {
         'hr': ['Mark McGwire', 'Sammy Sosa'],
         'rbi': ['Sammy Sosa', 'Ken Griffey'],
      })

##############################################################################################################

class AnchorAndAliasTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         ---
         hr:
           - Mark McGwire
           # Following node labeled SS
           - &SS Sammy Sosa
         rbi:
           - *SS # Subsequent occurrence
           - Ken Griffey
      '''))
      self.assertEqual(o, {
         'hr': ['Mark McGwire', 'Sammy Sosa'],
         'rbi': ['Sammy Sosa', 'Ken Griffey'],
      })

##############################################################################################################

class ComplexKeysTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         ? - Detroit Tigers
           - Chicago cubs
         :
           - 2001-07-23

         ? [ New York Yankees,
             Atlanta Braves ]
         : [ 2001-07-02, 2001-08-12,
             2001-08-14 ]
      '''))
      self.assertEqual(o, {
         ('Detroit Tigers', 'Chicago cubs'): [
            datetime.datetime(2001, 7, 23, tzinfo=y.UTC),
         ],
         ('New York Yankees', 'Atlanta Braves'): [
            datetime.datetime(2001, 7, 2, tzinfo=y.UTC),
            datetime.datetime(2001, 8, 12, tzinfo=y.UTC),
            datetime.datetime(2001, 8, 14, tzinfo=y.UTC),
         ],
      })

##############################################################################################################

class CompactNestedMappingTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         ---
         # Products purchased
         - item    : Super Hoop
           quantity: 1
         - item    : Basketball
           quantity: 4
         - item    : Big Shoes
           quantity: 1
      ''')), [
         {'item': 'Super Hoop', 'quantity': 1},
         {'item': 'Basketball', 'quantity': 4},
         {'item': 'Big Shoes', 'quantity': 1},
      ])

##############################################################################################################

class LiteralNewlinesPreservedTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent(r'''
         # ASCII Art
         --- |
           \//||\/||
           // ||  ||__
      ''')), '\\//||\\/||\n// ||  ||__\n')

##############################################################################################################

class FoldedNewlinesBecomeSpacesTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         --- >
           Mark McGwire's
           year was crippled
           by a knee injury.
      ''')), 'Mark McGwire\'s year was crippled by a knee injury.\n')

##############################################################################################################

class FoldedNewlinesPreservedTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         --- >
          Sammy Sosa completed another
          fine season with great stats.

            63 Home Runs
            0.288 Batting Average

          What a year!
      ''')),
         'Sammy Sosa completed another fine season with great stats.\n' +
         '\n' +
         '  63 Home Runs\n' +
         '  0.288 Batting Average\n' +
         '\n' +
         'What a year!\n'
      )

##############################################################################################################

class IndentationDeterminesScopeTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         name: Mark McGwire
         accomplishment: >
           Mark set a major league
           home run record in 1998.
         stats: |
           65 Home Runs
           0.278 Batting Average
      ''')), {
         'name': 'Mark McGwire',
         'accomplishment': 'Mark set a major league home run record in 1998.\n',
         'stats': '65 Home Runs\n0.278 Batting Average\n',
      })

##############################################################################################################

class QuotedScalarsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent(r'''
         unicode: "Sosa did fine.\u263A"
         control: "\b1998\t1999\t2000\n"
         hex esc: "\x0d\x0a is \r\n"

         single: '"Howdy!" he cried.'
         quoted: ' # Not a ''comment''.'
         tie-fighter: '|\-*-/|'
      ''')), {
         'unicode': 'Sosa did fine.\u263a',
         'control': '\b1998\t1999\t2000\n',
         'hex esc': '\r\n is \r\n',
         'single': '"Howdy!" he cried.',
         'quoted': ' # Not a \'comment\'.',
         'tie-fighter': '|\\-*-/|',
      })

##############################################################################################################

class MultiLineFlowScalarsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent(r'''
         plain:
           This unquoted scalar
           spans many lines.

         quoted: "So does this
           quoted scalar.\n"
      ''')), {
         'plain': 'This unquoted scalar spans many lines.',
         'quoted': 'So does this quoted scalar.\n',
      })

##############################################################################################################

class IntegersTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         canonical: 12345
         decimal: +12345
         octal: 0o14
         hexadecimal: 0xC
      ''')), {
         'canonical': 12345,
         'decimal': 12345,
         'octal': 12,
         'hexadecimal': 12,
      })

##############################################################################################################

class FloatingPointTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         canonical: 1.23015e+3
         exponential: 12.3015e+02
         fixed: 1230.15
         negative infinity: -.inf
         not a number: .NaN
      '''))
      self.assertEqual(o['canonical'], 1230.15)
      self.assertEqual(o['exponential'], 1230.15)
      self.assertEqual(o['fixed'], 1230.15)
      self.assertEqual(o['negative infinity'], float('-inf'))
      self.assertTrue(math.isnan(o['not a number']))

##############################################################################################################

class MiscellaneousTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         null:
         booleans: [ true, false ]
         string: '012345'
      ''')), {
         None: None,
         'booleans': [True, False],
         'string': '012345',
      })

##############################################################################################################

class TimestampsTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         canonical: 2001-12-15T02:59:43.1Z
         iso8601: 2001-12-14t21:59:43.10-05:00
         spaced: 2001-12-14 21:59:43.10 -5
         date: 2002-12-14
      '''))
      instant = datetime.datetime(2001, 12, 15, 2, 59, 43, 100000, tzinfo=y.UTC)
      self.assertEqual(o['canonical'], instant)
      self.assertEqual(o['iso8601'], instant)
      self.assertEqual(o['spaced'], instant)
      self.assertEqual(o['spaced'].utcoffset(), datetime.timedelta(hours=-5))
      self.assertEqual(o['date'], datetime.datetime(2002, 12, 14, tzinfo=y.UTC))

##############################################################################################################

class VariousExplicitTagsTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         ---
         not-date: !!str 2002-04-28

         picture: !!binary |
          R0lGODlhDAAMAIQAAP//9/X17unp5WZmZgAAAOfn515eXvPz7Y6OjuDg4J+fn5OTk6enp56enmleECcgggoBADs=

         application specific tag: !something |
          The semantics of the tag
          above may be different for
          different documents.
      '''))
      self.assertEqual(o['not-date'], '2002-04-28')
      self.assertEqual(o['picture'], base64.b64decode(
         'R0lGODlhDAAMAIQAAP//9/X17unp5WZmZgAAAOfn515eXvPz7Y6OjuDg4J+fn5OTk6enp56enmleECcgggoBADs='
      ))
      self.assertEqual(o['application specific tag'], yr.TaggedValue(
         '!something',
         'The semantics of the tag\nabove may be different for\ndifferent documents.\n'
      ))

##############################################################################################################

class GlobalTagsTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         %TAG ! tag:clarkevans.com,2002:
         --- !shape
           # Use the ! handle for presenting
           # tag:clarkevans.com,2002:circle
         - !circle
           center: &ORIGIN {x: 73, y: 129}
           radius: 7
         - !line
           start: *ORIGIN
           finish: { x: 89, y: 102 }
         - !label
           start: *ORIGIN
           color: 0xFFEEBB
           text: Pretty vector drawing.
      '''))
      prefix = 'tag:clarkevans.com,2002:'
      self.assertEqual(o, yr.TaggedValue(prefix + 'shape', [
         yr.TaggedValue(prefix + 'circle', {'center': {'x': 73, 'y': 129}, 'radius': 7}),
         yr.TaggedValue(prefix + 'line', {'start': {'x': 73, 'y': 129}, 'finish': {'x': 89, 'y': 102}}),
         yr.TaggedValue(prefix + 'label', {
            'start': {'x': 73, 'y': 129}, 'color': 0xffeebb, 'text': 'Pretty vector drawing.'
         }),
      ]))
      # Aliases resolve to the same object as their anchor.
      origin = o.value[0].value['center']
      self.assertIs(o.value[1].value['start'], origin)
      self.assertIs(o.value[2].value['start'], origin)

##############################################################################################################

class UnorderedSetsTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(decode_string(textwrap.dedent('''
         # Sets are represented as a
         # Mapping where each key is
         # associated with a null value
         --- !!set
         ? Mark McGwire
         ? Sammy Sosa
         ? Ken Griffey
      ''')), set(('Mark McGwire', 'Sammy Sosa', 'Ken Griffey')))

##############################################################################################################

class OrderedMappingsTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         # Ordered maps are represented as
         # A sequence of mappings, with
         # each mapping having one key
         --- !!omap
         - Mark McGwire: 65
         - Sammy Sosa: 63
         - Ken Griffey: 58
      '''))
      self.assertIsInstance(o, collections.OrderedDict)
      self.assertEqual(list(o.items()), [('Mark McGwire', 65), ('Sammy Sosa', 63), ('Ken Griffey', 58)])

##############################################################################################################

class InvoiceTest(unittest.TestCase):
   def runTest(self):
      o = decode_string(textwrap.dedent('''
         --- !<tag:clarkevans.com,2002:invoice>
         invoice: 34843
         date   : 2001-01-23
         bill-to: &id001
             given  : Chris
             family : Dumars
             address:
                 lines: |
                     458 Walkman Dr.
                     Suite #292
                 city    : Royal Oak
                 state   : MI
                 postal  : 48046
         ship-to: *id001
         product:
             - sku         : BL394D
               quantity    : 4
               description : Basketball
               price       : 450.00
             - sku         : BL4438H
               quantity    : 1
               description : Super Hoop
               price       : 2392.00
         tax  : 251.42
         total: 4443.52
         comments:
             Late afternoon is best.
             Backup contact is Nancy
             Billsmer @ 338-4338.
      '''))
      self.assertIsInstance(o, yr.TaggedValue)
      self.assertEqual(o.tag, 'tag:clarkevans.com,2002:invoice')
      invoice = o.value
      bill_to = {
         'given': 'Chris',
         'family': 'Dumars',
         'address': {
            'lines': '458 Walkman Dr.\nSuite #292\n',
            'city': 'Royal Oak',
            'state': 'MI',
            'postal': 48046,
         },
      }
      self.assertEqual(invoice, {
         'invoice': 34843,
         'date': datetime.datetime(2001, 1, 23, tzinfo=y.UTC),
         'bill-to': bill_to,
         'ship-to': bill_to,
         'product': [
            {'sku': 'BL394D', 'quantity': 4, 'description': 'Basketball', 'price': 450.0},
            {'sku': 'BL4438H', 'quantity': 1, 'description': 'Super Hoop', 'price': 2392.0},
         ],
         'tax': 251.42,
         'total': 4443.52,
         'comments': 'Late afternoon is best. Backup contact is Nancy Billsmer @ 338-4338.',
      })
      self.assertIs(invoice['ship-to'], invoice['bill-to'])

##############################################################################################################

class LogFileTest(unittest.TestCase):
   def runTest(self):
      docs = decode_all(textwrap.dedent('''
         ---
         Time: 2001-11-23 15:01:42 -5
         User: ed
         Warning:
           This is an error message
           for the log file
         ---
         Time: 2001-11-23 15:02:31 -5
         User: ed
         Warning:
           A slightly different error
           message.
         ---
         Date: 2001-11-23 15:03:17 -5
         User: ed
         Fatal:
           Unknown variable "bar"
         Stack:
           - file: TopClass.py
             line: 23
             code: |
               x = MoreObject("345\\n")
           - file: MoreClass.py
             line: 58
             code: |-
               foo = bar
      '''))
      tz = y.TimestampTZInfo('-5', -5, 0)
      self.assertEqual(docs, [{
         'Time': datetime.datetime(2001, 11, 23, 15, 1, 42, tzinfo=tz),
         'User': 'ed',
         'Warning': 'This is an error message for the log file',
      }, {
         'Time': datetime.datetime(2001, 11, 23, 15, 2, 31, tzinfo=tz),
         'User': 'ed',
         'Warning': 'A slightly different error message.',
      }, {
         'Date': datetime.datetime(2001, 11, 23, 15, 3, 17, tzinfo=tz),
         'User': 'ed',
         'Fatal': 'Unknown variable "bar"',
         'Stack': [{
            'file': 'TopClass.py',
            'line': 23,
            'code': 'x = MoreObject("345\\n")\n',
         }, {
            'file': 'MoreClass.py',
            'line': 58,
            'code': 'foo = bar',
         }],
      }])
