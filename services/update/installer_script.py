"""Launcher scripts that swap in a staged update after the application exits."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
import textwrap
from pathlib import Path


__all__ = ["write_update_script"]


_LOGGER = logging.getLogger(__name__)


_POWERSHELL_UPDATE_SCRIPT = textwrap.dedent(
    """
    param(
        [int]$ProcessId,
        [string]$StagePath,
        [string]$InstallPath,
        [string]$ExecutablePath,
        [string]$FailureMarkerPath = ''
    )

    $ErrorActionPreference = 'Stop'

    function Write-Log {
        param([string]$Message)
        $timestamp = Get-Date -Format 'yyyy-MM-dd HH:mm:ss'
        Write-Output "$timestamp $Message"
    }

    function Write-FailureMarker {
        param([string]$Reason, [string]$Advice)

        if ($FailureMarkerPath -eq '') {
            return
        }

        try {
            $payload = @{
                reason = $Reason
                advice = $Advice
                recorded_at = (Get-Date -Format 'o')
            } | ConvertTo-Json -Compress

            $encoding = New-Object System.Text.UTF8Encoding($false)
            [System.IO.File]::WriteAllText($FailureMarkerPath, $payload, $encoding)
        }
        catch {
            Write-Log ("Failed to record failure marker: " + $_.Exception.Message)
        }
    }

    function Move-ItemWithRetry {
        param([string]$SourcePath, [string]$DestinationPath)

        $delay = 250
        for ($attempt = 1; $attempt -le 8; $attempt++) {
            try {
                Move-Item -LiteralPath $SourcePath -Destination $DestinationPath -Force -ErrorAction Stop
                return
            }
            catch {
                if ($attempt -eq 8) {
                    throw
                }
                Write-Log ("Move attempt $attempt failed: " + $_.Exception.Message + ". Retrying in " + $delay + " ms.")
                Start-Sleep -Milliseconds $delay
                $delay = [Math]::Min($delay * 2, 4000)
            }
        }
    }

    Write-Log "Waiting for process $ProcessId to exit before installing update."
    while (Get-Process -Id $ProcessId -ErrorAction SilentlyContinue) {
        Start-Sleep -Milliseconds 500
    }

    if (($FailureMarkerPath -ne '') -and (Test-Path -LiteralPath $FailureMarkerPath)) {
        Remove-Item -LiteralPath $FailureMarkerPath -Force
    }

    $backupPath = $InstallPath + '.backup'
    if (Test-Path -LiteralPath $backupPath) {
        Remove-Item -LiteralPath $backupPath -Recurse -Force
    }

    try {
        if (Test-Path -LiteralPath $InstallPath) {
            Write-Log "Moving existing installation from $InstallPath to $backupPath."
            Move-ItemWithRetry -SourcePath $InstallPath -DestinationPath $backupPath
        }
        Write-Log "Moving staged update from $StagePath to $InstallPath."
        Move-ItemWithRetry -SourcePath $StagePath -DestinationPath $InstallPath
        if (Test-Path -LiteralPath $backupPath) {
            Remove-Item -LiteralPath $backupPath -Recurse -Force
        }
    }
    catch {
        $rawMessage = $_.Exception.Message
        Write-Log ("Installer script failed: " + $rawMessage)
        if (Test-Path -LiteralPath $backupPath) {
            if (Test-Path -LiteralPath $InstallPath) {
                Remove-Item -LiteralPath $InstallPath -Recurse -Force
            }
            Move-Item -LiteralPath $backupPath -Destination $InstallPath -Force
        }
        $advice = 'Close any other programs that might be using the installation folder and try again.'
        Write-FailureMarker $rawMessage $advice
        Write-Log "Relaunching previous application version at $ExecutablePath."
        Start-Process -FilePath $ExecutablePath -WorkingDirectory $InstallPath
        exit 1
    }

    Write-Log "Launching updated application at $ExecutablePath."
    Start-Process -FilePath $ExecutablePath -WorkingDirectory $InstallPath
    """
).strip()


_POSIX_UPDATE_SCRIPT = textwrap.dedent(
    """
    #!/bin/sh
    # usage: install.sh PID STAGE_PATH INSTALL_PATH EXECUTABLE_PATH FAILURE_MARKER_PATH
    PROCESS_ID="$1"
    STAGE_PATH="$2"
    INSTALL_PATH="$3"
    EXECUTABLE_PATH="$4"
    FAILURE_MARKER_PATH="$5"
    BACKUP_PATH="$INSTALL_PATH.backup"

    log() {
        echo "$(date '+%Y-%m-%d %H:%M:%S') $1"
    }

    json_escape() {
        escaped=$(printf '%s\\n' "$1" | sed 's/[\\\\"]/\\\\&/g' | tr '\\n\\r\\t' '   ')
        printf '%s' "${escaped% }"
    }

    fail() {
        log "Installer script failed: $1"
        if [ -d "$BACKUP_PATH" ]; then
            rm -rf "$INSTALL_PATH"
            mv "$BACKUP_PATH" "$INSTALL_PATH"
        fi
        if [ -n "$FAILURE_MARKER_PATH" ]; then
            printf '{"reason": "%s", "advice": "%s"}' "$(json_escape "$1")" \\
                "Ensure you have permission to modify the installation folder and try again." \\
                > "$FAILURE_MARKER_PATH"
        fi
        log "Relaunching previous application version at $EXECUTABLE_PATH."
        "$EXECUTABLE_PATH" >/dev/null 2>&1 &
        exit 1
    }

    log "Waiting for process $PROCESS_ID to exit before installing update."
    while kill -0 "$PROCESS_ID" 2>/dev/null; do
        sleep 0.5
    done

    [ -n "$FAILURE_MARKER_PATH" ] && rm -f "$FAILURE_MARKER_PATH"
    rm -rf "$BACKUP_PATH"

    if [ -d "$INSTALL_PATH" ]; then
        log "Moving existing installation from $INSTALL_PATH to $BACKUP_PATH."
        mv "$INSTALL_PATH" "$BACKUP_PATH" || fail "Unable to back up $INSTALL_PATH"
    fi
    log "Moving staged update from $STAGE_PATH to $INSTALL_PATH."
    mv "$STAGE_PATH" "$INSTALL_PATH" || fail "Unable to move staged update into $INSTALL_PATH"
    chmod +x "$EXECUTABLE_PATH" 2>/dev/null
    rm -rf "$BACKUP_PATH"

    log "Launching updated application at $EXECUTABLE_PATH."
    "$EXECUTABLE_PATH" >/dev/null 2>&1 &
    """
).strip()


def write_update_script(*, windows: bool | None = None) -> Path:
    """Write the platform's installer script to a fresh temporary directory."""

    if windows is None:
        windows = os.name == "nt"
    script_dir = Path(tempfile.mkdtemp(prefix="comet-update-script-"))
    if windows:
        script_path = script_dir / "install.ps1"
        script_path.write_text(_POWERSHELL_UPDATE_SCRIPT, encoding="utf-8")
    else:
        script_path = script_dir / "install.sh"
        script_path.write_text(_POSIX_UPDATE_SCRIPT + "\n", encoding="utf-8")
        script_path.chmod(script_path.stat().st_mode | stat.S_IXUSR)
    _LOGGER.debug("Wrote update script to %s", script_path)
    return script_path
