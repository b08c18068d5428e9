# -*- coding: utf-8; mode: python; tab-width: 3; indent-tabs-mode: nil -*-
#
# Copyright 2014, 2016-2017 Raffaello D. Di Napoli
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

"""Logging-related classes."""

import sys
import threading


##############################################################################################################

class LogGenerator(object):
   """Generator of logs. A single instance is normally shared by all the Logger instances involved in decoding
   a stream.
   """

   # Count of documents that could not be decoded.
   _failed_documents = None
   # Output stream; standard error by default.
   _stderr = None
   # Lock that must be acquired prior to writing to stderr.
   _stderr_lock = None
   # Total count of documents processed, whether successfully or not.
   _total_documents = None

   def __init__(self, stderr=None):
      """Constructor.

      io.TextIOBase stderr
         Stream to write logs to; defaults to sys.stderr.
      """

      self._failed_documents = 0
      if stderr is None:
         self._stderr = sys.stderr
      else:
         self._stderr = stderr
      self._stderr_lock = threading.Lock()
      self._total_documents = 0
      self.verbosity = Logger.QUIET

   def add_document_result(self, failed):
      """Implementation of Logger.add_document_result()."""

      self._total_documents += 1
      if failed:
         self._failed_documents += 1

   def _summary_counts(self, total, failed):
      """Generates a total/decoded/failed summary line.

      int total
         Total count.
      int failed
         Count of failures.
      str return
         String with the summary counts.
      """

      decoded = total - failed
      return '{:5} total, {:5} decoded ({:3}%), {:5} failed ({:3}%)'.format(
         total, decoded, decoded * 100 // total, failed, failed * 100 // total,
      )

   # Selects a verbosity level (canonyaml.logging.Logger.*), affecting what is displayed about the documents
   # being decoded.
   verbosity = None

   def write(self, s):
      """Implementation of Logger._write()."""

      s += '\n'
      # Lock stderr and write to it.
      with self._stderr_lock:
         self._stderr.write(s)

   def write_summary(self):
      """Implementation of Logger.summary()."""

      if self._total_documents:
         self.write('canonyaml: summary:')
         self.write('  Documents: ' + self._summary_counts(self._total_documents, self._failed_documents))
      else:
         self.write('Documents: none found')

##############################################################################################################

class Logger(object):
   """Basic logger functor."""

   # LogGenerator instance to use for logging.
   _log_gen = None

   # No verbosity, i.e. quiet operation (default). Only documents skipped due to errors are reported.
   QUIET = 1
   # Also print a line for each document decoded.
   LOW = 2
   # Like LOW, and also report tags that fell back to a string or were not recognized, and ignored
   # directives.
   MEDIUM = 3
   # Like MEDIUM, and also trace every token scanned.
   HIGH = 4

   def __init__(self, log_gen):
      """Constructor.

      object log_gen
         canonyaml.logging.LogGenerator instance, or canonyaml.logging.Logger whose LogGenerator is to be
         shared.
      """

      if isinstance(log_gen, LogGenerator):
         self._log_gen = log_gen
      else:
         self._log_gen = log_gen._log_gen

   def __call__(self, level, format, *args, **kwargs):
      """Logs a formatted string. A new-line character will be automatically appended because due to
      concurrency, a thread should not expect to log a complete line with multiple log calls.

      int level
         Minimum logging level. If the log verbosity setting is below this value, the log entry will not be
         printed. If this value is None, the message will be output unconditionally (useful to report errors,
         for example).
      str format
         Format string.
      iterable(object*) *args
         Forwarded to format.format().
      dict(str: object) **kwargs
         Forwarded to format.format().
      """

      if level is None or self._log_gen.verbosity >= level:
         self._write(format.format(*args, **kwargs))

   def add_document_result(self, failed):
      """Stores the outcome of decoding a document for later display as part of the summary.

      bool failed
         True if the document could not be decoded, or False otherwise.
      """

      self._log_gen.add_document_result(failed)

   def summary(self):
      """Generates and logs a summary of the documents decoded and failed."""

      self._log_gen.write_summary()

   def _get_verbosity(self):
      return self._log_gen.verbosity

   def _set_verbosity(self, level):
      self._log_gen.verbosity = level

   verbosity = property(_get_verbosity, _set_verbosity, doc="""
      Selects a verbosity level (canonyaml.logging.Logger.*), affecting what is displayed about the documents
      being decoded.
   """)

   def _write(self, s):
      """Unconditionally logs a string.

      str s
         Text to log.
      """

      self._log_gen.write(s)
