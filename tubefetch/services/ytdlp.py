import asyncio
from typing import List, NamedTuple

from tubefetch.config.settings import config


class CompletedProcess(NamedTuple):
    """Finished short-lived yt-dlp run"""
    returncode: int
    stdout: bytes
    stderr: bytes


class SubprocessExecutor:
    """Run short yt-dlp commands (metadata, version) to completion"""

    @staticmethod
    async def run(cmd: List[str], timeout: float) -> CompletedProcess:
        """Collect both pipes; the process is killed if the wait times out or is cancelled"""
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            stdin=asyncio.subprocess.DEVNULL
        )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except BaseException:
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        return CompletedProcess(process.returncode, stdout, stderr)


class YTDLPCommandBuilder:
    """Build yt-dlp commands"""

    @staticmethod
    def _common_options() -> List[str]:
        cmd = [
            '--no-playlist',
            '--socket-timeout', str(config.provider.socket_timeout),
            '--retries', str(config.provider.retries),
        ]
        if config.provider.js_runtime:
            cmd.extend(['--js-runtimes', config.provider.js_runtime])
        return cmd

    @staticmethod
    def build_version_command() -> List[str]:
        return [config.provider.binary, '--version']

    @staticmethod
    def build_info_command(url: str) -> List[str]:
        """Build command for fetching video info"""
        cmd = [config.provider.binary, '--dump-json']
        cmd.extend(YTDLPCommandBuilder._common_options())
        cmd.extend(['--', url])
        return cmd

    @staticmethod
    def build_stream_command(url: str, format_id: str) -> List[str]:
        """Build command writing exactly one format to stdout"""
        cmd = [
            config.provider.binary,
            '-f', format_id,
            '-o', '-',
        ]
        cmd.extend(YTDLPCommandBuilder._common_options())

        # Keep stdout clean for the binary payload
        cmd.append('--no-progress')
        cmd.append('--quiet')
        cmd.append('--no-warnings')

        cmd.extend(['--', url])
        return cmd
