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

"""Test cases for YAML document stream decoding."""

import io
import os
import tempfile
import unittest

import canonyaml as y
import canonyaml.logging as yl
import canonyaml.resolver as yr
import canonyaml.stream as ys
from canonyaml.nodes import ScalarNode


def make_decoder(**kwargs):
   """Returns a decoder logging to a string, along with the string."""

   stderr = io.StringIO()
   log = yl.Logger(yl.LogGenerator(stderr))
   return ys.Decoder(logger=log, **kwargs), log, stderr


##############################################################################################################

class IterLinesTest(unittest.TestCase):
   def runTest(self):
      self.assertEqual(list(ys.iter_lines('')), [])
      self.assertEqual(list(ys.iter_lines('a\nb')), ['a\n', 'b'])
      self.assertEqual(list(ys.iter_lines('a\r\nb\rc\n')), ['a\r\n', 'b\r', 'c\n'])
      self.assertEqual(list(ys.iter_lines(b'\xef\xbb\xbfa: 1\nb: 2')), ['a: 1\n', 'b: 2'])

      # Chunks that don’t line up with lines.
      self.assertEqual(list(ys.iter_lines(['a: ', '1\nb', ': 2\n'])), ['a: 1\n', 'b: 2\n'])
      self.assertEqual(list(ys.iter_lines(['a\r', '\nb'])), ['a\r\n', 'b'])
      self.assertEqual(list(ys.iter_lines([b'a\n', b'b'])), ['a\n', 'b'])
      self.assertEqual(list(ys.iter_lines(io.StringIO('a\nb\n'))), ['a\n', 'b\n'])

##############################################################################################################

class SplitDocumentsTest(unittest.TestCase):
   def split(self, s):
      return list(ys.split_documents(ys.iter_lines(s)))

   def runTest(self):
      self.assertEqual(self.split(''), [])
      self.assertEqual(self.split('# just a comment\n\n'), [])
      self.assertEqual(self.split('a\n'), [(0, 'a\n')])
      self.assertEqual(self.split('---'), [(0, '---')])
      self.assertEqual(self.split('a\n---\nb\n...\n# c\n--- c\n'), [
         (0, 'a\n'),
         (1, '---\nb\n...\n'),
         (4, '# c\n--- c\n'),
      ])
      # Directives stay with the document that follows them.
      self.assertEqual(self.split('%YAML 1.1\n---\na\n---\nb\n'), [
         (0, '%YAML 1.1\n---\na\n'),
         (3, '---\nb\n'),
      ])
      # A leading comment doesn’t make a document of its own.
      self.assertEqual(self.split('# c\n---\na\n'), [(0, '# c\n---\na\n')])
      # Neither does a lone “...”.
      self.assertEqual(self.split('...\na\n'), [(1, 'a\n')])
      # Markers must start a line, and be followed by a blank.
      self.assertEqual(self.split('a: ---\n---b\n'), [(0, 'a: ---\n---b\n')])
      self.assertEqual(self.split('---\n---\n'), [(0, '---\n'), (1, '---\n')])

##############################################################################################################

class MultipleDocumentsTest(unittest.TestCase):
   def runTest(self):
      decoder, log, stderr = make_decoder()
      self.assertEqual(list(decoder.decode_stream('- 1\n---\n- 2\n...\n--- x\n')), [[1], [2], 'x'])
      self.assertEqual(list(decoder.decode_stream('---\n---\n')), [None, None])
      self.assertEqual(list(decoder.decode_stream('')), [])
      self.assertEqual(stderr.getvalue(), '')

      documents = list(decoder.documents('a\n--- b\n'))
      self.assertEqual(len(documents), 2)
      self.assertEqual(documents[0].root, ScalarNode('a'))
      self.assertFalse(documents[0].explicit)
      self.assertEqual(documents[1].root, ScalarNode('b'))
      self.assertTrue(documents[1].explicit)
      self.assertEqual(documents[1].start_mark, y.Mark('<string>', 1, 0))

      self.assertEqual(ys.decode_string('a: 1'), {'a': 1})
      self.assertEqual(list(ys.decode_stream('1\n--- 2\n')), [1, 2])

##############################################################################################################

class DocumentIsolationTest(unittest.TestCase):
   def runTest(self):
      # %TAG directives only apply to the document that follows them.
      s = '%TAG !e! tag:e.com,2000:\n--- !e!a 1\n--- !e!b 2\n'
      decoder, log, stderr = make_decoder()
      values = decoder.decode_stream(s)
      self.assertEqual(next(values), yr.TaggedValue('tag:e.com,2000:a', '1'))
      with self.assertRaises(y.StructuralError) as cm:
         next(values)
      self.assertEqual(cm.exception.mark, y.Mark('<string>', 2, 4))

      # So do anchors.
      decoder, log, stderr = make_decoder()
      self.assertRaises(y.StructuralError, list, decoder.decode_stream('--- &a 1\n--- *a\n'))

      # An error in a document doesn’t affect the previous ones.
      decoder, log, stderr = make_decoder(on_error=ys.ErrorPolicy.SKIP)
      self.assertEqual(list(decoder.decode_stream(s)), [yr.TaggedValue('tag:e.com,2000:a', '1')])
      self.assertIn(
         'skipping document at <string>:3: <string>:3:5: undefined tag handle “!e!”', stderr.getvalue()
      )

##############################################################################################################

class ErrorPolicyTest(unittest.TestCase):
   def runTest(self):
      s = '- a\n---\n[b\n---\n- c\n'

      decoder, log, stderr = make_decoder(on_error=ys.ErrorPolicy.SKIP)
      self.assertEqual(list(decoder.decode_stream(s)), [['a'], ['c']])
      self.assertIn('skipping document at <string>:2: ', stderr.getvalue())
      self.assertIn('unterminated flow collection', stderr.getvalue())
      log.summary()
      self.assertIn('3 total,     2 decoded ( 66%),     1 failed ( 33%)', stderr.getvalue())

      decoder, log, stderr = make_decoder()
      values = decoder.decode_stream(s)
      self.assertEqual(next(values), ['a'])
      with self.assertRaises(y.LexicalError) as cm:
         next(values)
      self.assertEqual(cm.exception.mark, y.Mark('<string>', 2, 0))
      self.assertEqual(stderr.getvalue(), '')
      log.summary()
      self.assertIn('2 total,     1 decoded ( 50%),     1 failed ( 50%)', stderr.getvalue())

      self.assertIs(ys.ErrorPolicy.from_str('skip'), ys.ErrorPolicy.SKIP)
      self.assertIs(ys.ErrorPolicy.from_str('stop'), ys.ErrorPolicy.STOP)
      self.assertEqual(ys.ErrorPolicy.from_str('ignore'), 'ignore')

##############################################################################################################

class DecodeStringTest(unittest.TestCase):
   def runTest(self):
      decoder, log, stderr = make_decoder()
      self.assertEqual(decoder.decode_string('a: [1, 2]'), {'a': [1, 2]})
      self.assertIsNone(decoder.decode_string(''))
      self.assertIsNone(decoder.decode_string('# nothing to see\n'))
      self.assertIsNone(decoder.decode_string('---\n'))

      with self.assertRaises(y.StructuralError) as cm:
         decoder.decode_string('a\n---\nb\n')
      self.assertEqual(cm.exception.message, 'expected a single document')
      self.assertEqual(cm.exception.mark, y.Mark('<string>', 1, 0))

      with self.assertRaises(y.LexicalError) as cm:
         decoder.decode_string('a: "b', 'inline.yml')
      self.assertEqual(cm.exception.mark.source_name, 'inline.yml')

      decoder, log, stderr = make_decoder(on_error=ys.ErrorPolicy.SKIP)
      self.assertIsNone(decoder.decode_string('[a'))

##############################################################################################################

class DecodeFileTest(unittest.TestCase):
   def write_temp_file(self, content):
      with tempfile.NamedTemporaryFile(suffix='.yml', delete=False) as f:
         f.write(content)
      self.addCleanup(os.remove, f.name)
      return f.name

   def runTest(self):
      decoder, log, stderr = make_decoder()

      file_path = self.write_temp_file(b'\xef\xbb\xbfa: 1\n---\nb: 2\n')
      self.assertEqual(decoder.decode_file(file_path), [{'a': 1}, {'b': 2}])
      self.assertEqual(ys.decode_file(file_path), [{'a': 1}, {'b': 2}])

      file_path = self.write_temp_file('a: è\r\nb: [1,\r\n  2]\r\n'.encode('utf-8'))
      self.assertEqual(decoder.decode_file(file_path), [{'a': 'è', 'b': [1, 2]}])

      file_path = self.write_temp_file(b'a: 1\n---\nb: [1\n')
      with self.assertRaises(y.LexicalError) as cm:
         decoder.decode_file(file_path)
      self.assertEqual(cm.exception.mark, y.Mark(file_path, 2, 3))
      self.assertTrue(str(cm.exception).startswith(file_path + ':3:4: '))

##############################################################################################################

class LoggingTest(unittest.TestCase):
   def runTest(self):
      s = '- 1\n---\n- 2\n'

      decoder, log, stderr = make_decoder()
      log.verbosity = log.LOW
      self.assertEqual(list(decoder.decode_stream(s)), [[1], [2]])
      self.assertEqual(stderr.getvalue().count('document decoded'), 2)
      self.assertIn('<string>:2:1: document decoded\n', stderr.getvalue())
      self.assertNotIn('Token(', stderr.getvalue())

      decoder, log, stderr = make_decoder()
      log.verbosity = log.HIGH
      self.assertEqual(list(decoder.decode_stream(s)), [[1], [2]])
      self.assertIn('<string>:1:3: Token(scalar, \'1\', plain)\n', stderr.getvalue())
      self.assertIn('<string>:2:1: Token(document start)\n', stderr.getvalue())
      self.assertIn('<string>:3:3: Token(scalar, \'2\', plain)\n', stderr.getvalue())

      # Unknown directives are reported, then ignored.
      decoder, log, stderr = make_decoder()
      log.verbosity = log.MEDIUM
      self.assertEqual(decoder.decode_string('%FOO bar\n--- a\n'), 'a')
      self.assertIn('<string>:1:1: ignoring unknown directive %FOO\n', stderr.getvalue())
