from hackvm.cli import main

# 词法解析 -> 语法解析 -> 代码生成
# lexer -> parser -> codegen -> .asm


if __name__ == '__main__':
    main()
