"""Protocole de lancement commun à tous les adaptateurs de shell.

Lancement → écriture optionnelle sur stdin (fermeture anticipée
tolérée) → lecture complète des deux flux → attente de la fin. En cas
de dépassement du délai, le processus (tout son groupe sur POSIX) est
tué avant que ExecutionTimeoutError ne soit levée ; il l'est aussi
quand l'attente est interrompue (KeyboardInterrupt...).
"""

import io
import os
import signal
import subprocess  # nosec B404
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from cli_tool_utils.errors.exceptions import (ExecutionError,
                                              ExecutionTimeoutError)

DEFAULT_TIMEOUT = 90

StdinData = Union[str, bytes, io.IOBase, Any]


@dataclass(frozen=True)
class ProcessOutput:
    """Sortie brute d'un processus terminé.

    Attributes:
        status: Code de sortie normalisé.
        stdout: Sortie standard décodée.
        stderr: Sortie d'erreur décodée.
    """

    status: int
    stdout: str
    stderr: str


def normalize_status(returncode: Optional[int]) -> int:
    """Convertit un code de retour subprocess en entier de sortie.

    Un enfant tué par un signal (code négatif côté subprocess) donne
    ``128 + numéro du signal``, comme le rapportent les shells.
    """
    if returncode is None:
        return 1
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


def _stdin_bytes(stdin_data: StdinData, encoding: str) -> bytes:
    """Convertit les données d'entrée (chaîne, octets, fichier) en octets."""
    if isinstance(stdin_data, bytes):
        return stdin_data
    if isinstance(stdin_data, str):
        return stdin_data.encode(encoding)
    if hasattr(stdin_data, "read"):
        content = stdin_data.read()
        if isinstance(content, str):
            return content.encode(encoding)
        return content
    raise TypeError(
        f"stdin doit être str, bytes ou un objet fichier, "
        f"reçu: {type(stdin_data).__name__}"
    )


def _kill(proc: subprocess.Popen) -> None:
    """Tue le processus et ses descendants."""
    if os.name == "posix":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            proc.kill()
        return
    # taskkill /T termine aussi les petits-enfants qui gardent les pipes
    subprocess.run(  # nosec B603 B607
        ["taskkill", "/F", "/T", "/PID", str(proc.pid)],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )
    proc.kill()


def run_process(
    argv: Union[List[str], str],
    executable: str,
    env: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    cwd: Optional[str] = None,
    stdin_data: Optional[StdinData] = None,
    encoding: str = "utf-8",
) -> ProcessOutput:
    """Lance un processus, attend sa fin et capture ses sorties.

    Args:
        argv: Ligne de commande (liste, ou chaîne brute sous Windows).
        executable: Exécutable cible, repris dans les erreurs.
        env: Environnement complet de l'enfant (None : hérité).
        timeout: Délai en secondes (None : DEFAULT_TIMEOUT).
        cwd: Répertoire de travail.
        stdin_data: Données écrites sur l'entrée standard.
        encoding: Encodage des flux.

    Returns:
        ProcessOutput avec le code normalisé et les sorties décodées.

    Raises:
        ExecutionError: Si le processus ne peut pas être lancé.
        ExecutionTimeoutError: Si le délai est dépassé.
    """
    effective_timeout = DEFAULT_TIMEOUT if timeout is None else timeout
    data = None
    if stdin_data is not None:
        data = _stdin_bytes(stdin_data, encoding)

    group_kwargs: Dict[str, Any] = {}
    if os.name == "posix":
        group_kwargs["start_new_session"] = True
    else:
        group_kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP

    try:
        proc = subprocess.Popen(  # nosec B603
            argv,
            stdin=subprocess.PIPE if data is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=env,
            cwd=cwd,
            **group_kwargs,
        )
    except OSError as e:
        raise ExecutionError(
            f"Impossible de lancer '{executable}' : {e}",
            executable=executable,
        ) from e

    try:
        # communicate() ignore BrokenPipeError si l'enfant ferme stdin
        stdout, stderr = proc.communicate(input=data, timeout=effective_timeout)
    except subprocess.TimeoutExpired:
        _kill(proc)
        proc.communicate()
        raise ExecutionTimeoutError(executable, effective_timeout)
    except BaseException:
        # l'enfant a sa propre session : Ctrl-C ne l'atteint pas
        _kill(proc)
        proc.wait()
        raise

    return ProcessOutput(
        status=normalize_status(proc.returncode),
        stdout=stdout.decode(encoding, errors="replace"),
        stderr=stderr.decode(encoding, errors="replace"),
    )
