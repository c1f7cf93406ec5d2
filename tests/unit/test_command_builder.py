"""
Unit tests for ffmpeg command synthesis.

The argument vector is positional, so most assertions compare whole lists.
"""

import unittest
from pathlib import Path

from auto_sub.core.modules.processing.command_builder import (
    ATTACHMENT_MIMETYPE, CHAPTER_MIMETYPE, MuxOptions, build_mux_cmd, build_render_job,
    output_path_for
)
from auto_sub.core.modules.processing.file_classifier import ClassifiedFileSet, FileRef


class TestBuildMuxCmd(unittest.TestCase):
    """Test argument vector synthesis."""

    def setUp(self):
        self.source = Path("/videos/ep01")
        self.output_dir = Path("/videos/result")

    def _ref(self, name):
        return FileRef.from_path(self.source / name)

    def _file_set(self, media="movie.mkv", subtitles=(), attachments=(), chapters=()):
        return ClassifiedFileSet(
            directory=self.source,
            media_files=(self._ref(media),),
            subtitles=tuple(self._ref(n) for n in subtitles),
            attachments=tuple(self._ref(n) for n in attachments),
            chapters=tuple(self._ref(n) for n in chapters),
        )

    def test_subtitle_and_chapters(self):
        """Full command for one subtitle plus one chapter file."""
        file_set = self._file_set(subtitles=["subs.srt"], chapters=["chapters.xml"])

        cmd = build_mux_cmd(file_set, MuxOptions(), self.output_dir)

        self.assertEqual(cmd, [
            "-i", str(self.source / "movie.mkv"),
            "-i", str(self.source / "subs.srt"),
            "-c", "copy",
            "-map", "0", "-map", "1",
            "-metadata:s:s:0", "title=subs",
            "-metadata:s:s:0", "language=eng",
            "-attach", str(self.source / "chapters.xml"),
            "-metadata:s:t:0", f"mimetype={CHAPTER_MIMETYPE}",
            str(self.output_dir / "movie.mkv"),
        ])

    def test_map_indices_are_contiguous(self):
        file_set = self._file_set(subtitles=["a.srt", "b.ass", "c.vtt"])

        cmd = build_mux_cmd(file_set, MuxOptions(), self.output_dir)

        maps = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-map"]
        self.assertEqual(maps, ["0", "1", "2", "3"])
        inputs = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-i"]
        self.assertEqual(len(inputs), 4)

    def test_subtitle_metadata_indexed_per_subtitle(self):
        file_set = self._file_set(subtitles=["a.srt", "b.ass"])

        cmd = build_mux_cmd(file_set, MuxOptions(subtitle_title="English"), self.output_dir)

        pairs = [(cmd[i], cmd[i + 1]) for i, arg in enumerate(cmd) if arg.startswith("-metadata:s:s:")]
        self.assertEqual(pairs, [
            ("-metadata:s:s:0", "title=English"),
            ("-metadata:s:s:0", "language=eng"),
            ("-metadata:s:s:1", "title=English"),
            ("-metadata:s:s:1", "language=eng"),
        ])

    def test_no_language_omits_language_metadata(self):
        file_set = self._file_set(subtitles=["subs.srt"])

        cmd = build_mux_cmd(file_set, MuxOptions(subtitle_language=None), self.output_dir)

        self.assertFalse(any(arg.startswith("language=") for arg in cmd))
        self.assertIn("title=subs", cmd)

    def test_chapters_precede_attachments(self):
        """Chapters and fonts share one attachment stream counter."""
        file_set = self._file_set(attachments=["a.ttf", "b.otf"], chapters=["chapters.xml"])

        cmd = build_mux_cmd(file_set, MuxOptions(), self.output_dir)

        attached = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-attach"]
        self.assertEqual(attached, [
            str(self.source / "chapters.xml"),
            str(self.source / "a.ttf"),
            str(self.source / "b.otf"),
        ])
        pairs = [(cmd[i], cmd[i + 1]) for i, arg in enumerate(cmd) if arg.startswith("-metadata:s:t:")]
        self.assertEqual(pairs, [
            ("-metadata:s:t:0", f"mimetype={CHAPTER_MIMETYPE}"),
            ("-metadata:s:t:1", f"mimetype={ATTACHMENT_MIMETYPE}"),
            ("-metadata:s:t:2", f"mimetype={ATTACHMENT_MIMETYPE}"),
        ])

    def test_attachments_only_maps_media(self):
        file_set = self._file_set(attachments=["font.ttf"])

        cmd = build_mux_cmd(file_set, MuxOptions(), self.output_dir)

        self.assertEqual(cmd.count("-i"), 1)
        self.assertEqual(cmd.count("-map"), 1)

    def test_output_forced_to_mkv(self):
        file_set = self._file_set(media="Episode 01.mp4", subtitles=["subs.srt"])

        cmd = build_mux_cmd(file_set, MuxOptions(), self.output_dir)

        self.assertEqual(cmd[-1], str(self.output_dir / "Episode 01.mkv"))
        self.assertEqual(output_path_for(file_set, self.output_dir), self.output_dir / "Episode 01.mkv")

    def test_build_is_pure(self):
        """Same input, same output; the input is left untouched."""
        file_set = self._file_set(subtitles=["subs.srt"], attachments=["font.ttf"])
        options = MuxOptions(subtitle_title="Full")

        first = build_mux_cmd(file_set, options, self.output_dir)
        second = build_mux_cmd(file_set, options, self.output_dir)

        self.assertEqual(first, second)
        self.assertIsNot(first, second)
        self.assertEqual([f.name for f in file_set.subtitles], ["subs.srt"])


class TestRenderJob(unittest.TestCase):
    """Test the RenderJob wrapper."""

    def test_command_prefix(self):
        source = Path("/videos/ep01")
        file_set = ClassifiedFileSet(
            directory=source,
            media_files=(FileRef.from_path(source / "movie.mkv"),),
            subtitles=(FileRef.from_path(source / "subs.srt"),),
        )

        job = build_render_job(file_set, MuxOptions(), Path("/out"))

        self.assertEqual(job.source_dir, source)
        self.assertEqual(job.output_file, Path("/out/movie.mkv"))
        cmd = job.command("/usr/bin/ffmpeg")
        self.assertEqual(cmd[:3], ["/usr/bin/ffmpeg", "-hide_banner", "-y"])
        self.assertEqual(tuple(cmd[3:]), job.args)


if __name__ == '__main__':
    unittest.main()
