"""
Shell completion scripts for the bu command.

Usage:
    # Source bash completion
    source <(bu completion bash)

    # Add to .bashrc for persistent completion
    echo 'source <(bu completion bash)' >> ~/.bashrc
"""

BASH_COMPLETION = r'''
# bu bash completion
_bu_completions() {
    local cur prev sub
    COMPREPLY=()
    cur="${COMP_WORDS[COMP_CWORD]}"
    prev="${COMP_WORDS[COMP_CWORD-1]}"
    sub="${COMP_WORDS[1]}"

    local subcommands="list loaded ls load loadall unload reload commands functions fn allfunctions allfns fns info run shell check check-updates update config completion help"

    case "$prev" in
        -v|--verbose-level)
            COMPREPLY=($(compgen -W "-1 0 1 2" -- "$cur"))
            return 0
            ;;
    esac

    if [[ ${COMP_CWORD} -eq 1 ]]; then
        if [[ "$cur" == -* ]]; then
            COMPREPLY=($(compgen -W "--verbose-level -v --version --help" -- "$cur"))
        else
            COMPREPLY=($(compgen -W "$subcommands" -- "$cur"))
        fi
        return 0
    fi

    if [[ "$cur" == -* ]]; then
        case "$sub" in
            list|loaded|ls|commands|functions|fn)
                COMPREPLY=($(compgen -W "--json --help" -- "$cur"))
                ;;
            shell)
                COMPREPLY=($(compgen -W "--simple --help" -- "$cur"))
                ;;
            *)
                COMPREPLY=($(compgen -W "--help" -- "$cur"))
                ;;
        esac
        return 0
    fi

    if [[ ${COMP_CWORD} -eq 2 ]]; then
        case "$sub" in
            load|info)
                COMPREPLY=($(compgen -W "$(bu completion utils 2>/dev/null)" -- "$cur"))
                ;;
            unload|reload|commands|functions|fn)
                COMPREPLY=($(compgen -W "$(bu completion loaded 2>/dev/null)" -- "$cur"))
                ;;
            config)
                COMPREPLY=($(compgen -W "show set unset" -- "$cur"))
                ;;
            completion)
                COMPREPLY=($(compgen -W "bash zsh" -- "$cur"))
                ;;
        esac
    fi
}

# bu-init bash completion
_bu_init_completions() {
    local cur
    COMPREPLY=()
    cur="${COMP_WORDS[COMP_CWORD]}"

    if [[ "$cur" == -* ]]; then
        COMPREPLY=($(compgen -W "--force -f --quiet -q --help" -- "$cur"))
    fi
}

# Register completions
complete -o default -F _bu_completions bu
complete -o default -F _bu_init_completions bu-init
'''

ZSH_COMPLETION = r'''
# bu zsh completion
_bu() {
    local -a commands
    commands=(
        'list:List all available utilities'
        'loaded:List loaded utilities'
        'ls:List loaded utilities'
        'load:Load a utility'
        'loadall:Load all available utilities'
        'unload:Unload a utility'
        'reload:Reload a utility or all loaded ones'
        'commands:Show commands of loaded utilities'
        'functions:Show commands of loaded utilities'
        'fn:Show commands of loaded utilities'
        'allfunctions:Search commands of loaded utilities'
        'allfns:Search commands of loaded utilities'
        'fns:Search commands of loaded utilities'
        'info:Show details for a utility'
        'run:Run a command of a loaded utility'
        'shell:Start an interactive session'
        'check:Check for updates'
        'update:Update the utilities directory'
        'config:Show or change configuration'
        'completion:Print shell completion script'
        'help:Show help'
    )

    _arguments -C \\
        '(-v --verbose-level)'{-v,--verbose-level}'[Output verbosity]:level:(-1 0 1 2)' \\
        '--version[Show version]' \\
        '1:command:->command' \\
        '*::arg:->args'

    case $state in
        command)
            _describe 'command' commands
            ;;
        args)
            case $words[1] in
                load|info)
                    _arguments "1:utility:($(bu completion utils 2>/dev/null))"
                    ;;
                unload|reload|commands|functions|fn)
                    _arguments "1:utility:($(bu completion loaded 2>/dev/null))" '--json[Output as JSON]'
                    ;;
                list|loaded|ls)
                    _arguments '1:filter:' '--json[Output as JSON]'
                    ;;
                shell)
                    _arguments '--simple[Use simple shell]'
                    ;;
                config)
                    _arguments '1:action:(show set unset)' '2:key:' '3:value:'
                    ;;
                completion)
                    _arguments '1:shell:(bash zsh)'
                    ;;
            esac
            ;;
    esac
}

_bu_init() {
    _arguments \\
        '--force[Replace existing builtin links]' \\
        '-f[Replace existing builtin links]' \\
        '--quiet[Suppress output]' \\
        '-q[Suppress output]' \\
        '--help[Show help]'
}

compdef _bu bu
compdef _bu_init bu-init
'''
