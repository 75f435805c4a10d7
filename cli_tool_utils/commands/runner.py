"""Exécuteur de commandes à travers un adaptateur de shell.

Ce module fournit ProcessExecutor, une implémentation concrète de
CommandExecutor : il prépare l'environnement de l'enfant, lance la
commande via le shell choisi sous un délai, puis retourne un
ExecutionResult horodaté.

Les messages de log sont préfixés par le nom du shell :
    - Dans les logs fichier : PlainCommandFormatter
    - En console (optionnel) : AnsiCommandFormatter

Example :
    Exécution avec logs fichier et console colorée :

        from cli_tool_utils.commands import (
            ProcessExecutor,
            AnsiCommandFormatter,
        )
        from cli_tool_utils.shell import BashAdapter

        executor = ProcessExecutor(
            logger=logger,
            console_formatter=AnsiCommandFormatter(),
        )
        result = executor.run("git", ["status"], BashAdapter())
        print(result.stdout)
"""

import os
import time
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Sequence

from cli_tool_utils.commands.base import CommandExecutor
from cli_tool_utils.commands.formatter import (CommandFormatter,
                                               PlainCommandFormatter)
from cli_tool_utils.errors.exceptions import (ExecutionError,
                                              ExecutionTimeoutError)
from cli_tool_utils.logging.base import Logger
from cli_tool_utils.logging.debug import DebugTracer
from cli_tool_utils.models.result import ExecutionResult
from cli_tool_utils.shell.base import ShellAdapter
from cli_tool_utils.shell.process import DEFAULT_TIMEOUT, ProcessOutput

SPAWN_FAILURE_STATUS = 127


class ProcessExecutor(CommandExecutor):
    """Exécuteur de commandes via un adaptateur de shell.

    Attributes:
        _logger: Logger optionnel pour les logs fichier.
        _default_env: Variables ajoutées à chaque exécution.
        _default_timeout: Timeout par défaut en secondes.
        _headless: Appliquer l'environnement headless du shell.
        _platform: Plateforme passée à headless_environment.
        _plain: Formateur texte brut pour les logs fichier.
        _console_formatter: Formateur optionnel pour la console.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        default_env: Optional[Dict[str, str]] = None,
        default_timeout: float = DEFAULT_TIMEOUT,
        headless: bool = False,
        platform: Optional[str] = None,
        console_formatter: Optional[CommandFormatter] = None,
        tracer: Optional[DebugTracer] = None,
    ) -> None:
        """Initialise l'exécuteur.

        Args:
            logger: Logger optionnel pour les sorties fichier.
            default_env: Variables d'environnement par défaut
                (fusionnées avec os.environ).
            default_timeout: Timeout par défaut en secondes.
            headless: Supprimer l'initialisation graphique des outils.
            platform: Plateforme cible (défaut: détectée par le shell).
            console_formatter: Formateur optionnel pour la console
                (ex: AnsiCommandFormatter()).
            tracer: Traceur de diagnostic.
        """
        self._logger = logger
        self._default_env = default_env
        self._default_timeout = default_timeout
        self._headless = headless
        self._platform = platform
        self._plain = PlainCommandFormatter()
        self._console_formatter = console_formatter
        self._tracer = tracer or DebugTracer()

    def prepare_environment(
        self,
        shell: ShellAdapter,
        env: Optional[Dict[str, str]] = None,
        headless: Optional[bool] = None,
    ) -> Dict[str, str]:
        """Construit l'environnement complet de l'enfant.

        Ordre de fusion : os.environ, environnement headless du shell
        (si actif), default_env, puis env. Une variable explicite
        l'emporte donc sur les valeurs headless.

        Args:
            shell: Adaptateur utilisé.
            env: Variables spécifiques à cet appel.
            headless: Surcharge du réglage headless de l'exécuteur.

        Returns:
            Dictionnaire d'environnement.
        """
        merged = os.environ.copy()
        use_headless = self._headless if headless is None else headless
        if use_headless:
            merged.update(shell.headless_environment(self._platform))
        if self._default_env:
            merged.update(self._default_env)
        if env:
            merged.update({k: str(v) for k, v in env.items()})
        return merged

    def _resolve_timeout(self, timeout: Optional[float] = None) -> float:
        """Le timeout de l'appel est prioritaire sur celui par défaut."""
        if timeout is not None:
            return timeout
        return self._default_timeout

    def _log(self, message: str) -> None:
        if self._logger:
            self._logger.log_info(message)

    def _log_error(self, message: str) -> None:
        if self._logger:
            self._logger.log_error(message)

    def _console(self, message: str) -> None:
        if self._console_formatter:
            print(message)

    def run(
        self,
        executable: str,
        args: Sequence[str],
        shell: ShellAdapter,
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        stdin: Optional[Any] = None,
        allow_failure: bool = False,
        headless: Optional[bool] = None,
    ) -> ExecutionResult:
        """Exécute une commande et retourne le résultat.

        Args:
            executable: Exécutable résolu.
            args: Arguments ordonnés.
            shell: Adaptateur du shell de lancement.
            env: Variables d'environnement supplémentaires.
            cwd: Répertoire de travail.
            timeout: Timeout en secondes (prioritaire).
            stdin: Données (str, bytes ou fichier) pour l'entrée standard.
            allow_failure: Si True, un code non nul est retourné tel quel
                et un lancement impossible devient un résultat de code 127.
            headless: Surcharge du réglage headless.

        Returns:
            ExecutionResult.

        Raises:
            ExecutionTimeoutError: Toujours levée sur dépassement du délai.
            ExecutionError: Lancement impossible ou code non nul, sauf
                avec allow_failure.
        """
        args = [str(a) for a in args]
        effective_timeout = self._resolve_timeout(timeout)
        child_env = self.prepare_environment(shell, env, headless)
        command_line = shell.display_command(executable, args)

        self._tracer.section(
            "exécution",
            shell=shell.name,
            executable=executable,
            args=args,
            command=command_line,
            timeout=effective_timeout,
            cwd=cwd,
        )
        self._log(self._plain.format_start(command_line, shell.name))
        if self._console_formatter:
            self._console(
                self._console_formatter.format_start(command_line, shell.name)
            )

        started_at = datetime.now()
        start = time.monotonic()
        try:
            if stdin is not None:
                output = shell.execute_with_stdin(
                    executable, args, env=child_env, timeout=effective_timeout,
                    cwd=cwd, stdin_data=stdin,
                )
            else:
                output = shell.execute(
                    executable, args, env=child_env, timeout=effective_timeout,
                    cwd=cwd,
                )
        except ExecutionTimeoutError as e:
            self._log_error(
                self._plain.format_timeout(
                    command_line, shell.name, effective_timeout
                )
            )
            raise ExecutionTimeoutError(
                executable, effective_timeout, command=command_line
            ) from e
        except ExecutionError as e:
            self._log_error(
                self._plain.format_spawn_error(command_line, shell.name, str(e))
            )
            if not allow_failure:
                raise
            output = ProcessOutput(
                status=SPAWN_FAILURE_STATUS, stdout="", stderr=str(e)
            )
        finished_at = started_at + timedelta(seconds=time.monotonic() - start)

        result = ExecutionResult(
            executable=executable,
            command=command_line,
            arguments=tuple(args),
            shell=shell.name,
            stdout=output.stdout,
            stderr=output.stderr,
            exit_status=output.status,
            started_at=started_at,
            finished_at=finished_at,
            timeout=effective_timeout,
        )

        if result.exit_status != 0:
            self._log_error(
                self._plain.format_failure(
                    command_line, shell.name, result.exit_status
                )
            )
            if not allow_failure:
                raise ExecutionError(
                    self._failure_message(result),
                    executable=executable,
                    arguments=args,
                    result=result,
                )
        return result

    @staticmethod
    def _failure_message(result: ExecutionResult) -> str:
        return (
            f"Échec de la commande\n"
            f"Commande : {result.command}\n"
            f"Code de sortie : {result.exit_status}\n\n"
            f"STDOUT :\n{result.stdout.strip()}\n\n"
            f"STDERR :\n{result.stderr.strip()}"
        )
